"""
MongoModel base class.

Subclass ``MongoModel`` once per collection and declare the collection name,
an optional JSON Schema and optional indexes:

    class User(MongoModel):
        collection_name = "users"
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        }
        indexes = [{"key": {"name": 1}, "unique": True}]

    await connect("mongodb://localhost:27017", "app")
    await User.insert_one({"name": "Ren"})
    page = await User.paged_find({}, "name", "-_id", limit=10, page=1)

CRUD methods are thin passthroughs to the motor collection and return the
driver's values unchanged; use ``from_result`` (or ``normalize_result``) to
turn documents into model instances. Driver errors propagate unchanged.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection

from ..constants import ID_FIELD
from ..database.connection import MongoConnection, get_default_connection
from ..exceptions import ConfigurationError, InvalidIdentifierError
from ..indexes import IndexSpec, to_index_models
from ..observability import timed_operation
from .adapters import parse_fields, parse_sort
from .options import DeleteOptions, FindAndModifyOptions, FindOptions, WriteOptions
from .pagination import PagedResult, paged_find
from .results import normalize_result
from .validation import ValidationResult, validate

logger = logging.getLogger(__name__)


class MongoModel:
    """
    Attribute bag built from a document, plus class-level data access.

    Class attributes:
        collection_name: Name of the backing collection
        schema: JSON Schema used by validate() / validate_document()
        indexes: Index declarations created by create_indexes()
        id_class: Identifier type used by the ``*_by_id`` methods
        connection: Injected MongoConnection; the process default is used
            when None
    """

    collection_name: ClassVar[str | None] = None
    schema: ClassVar[dict[str, Any] | None] = None
    indexes: ClassVar[list[IndexSpec]] = []
    id_class: ClassVar[Callable[[Any], Any]] = ObjectId
    connection: ClassVar[MongoConnection | None] = None

    fields_adapter = staticmethod(parse_fields)
    sort_adapter = staticmethod(parse_sort)

    def __init__(self, attrs: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        if attrs:
            self.__dict__.update(attrs)
        self.__dict__.update(kwargs)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)

    def validate(self) -> ValidationResult:
        """Validate this instance against the class schema."""
        return validate(self.to_dict(), type(self).schema)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.__dict__ == other.__dict__

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.__dict__!r})"

    # ------------------------------------------------------------------
    # Class-level helpers
    # ------------------------------------------------------------------

    @classmethod
    def bind(cls, connection: MongoConnection | None) -> None:
        """Use ``connection`` for this model class instead of the process default."""
        cls.connection = connection

    @classmethod
    def get_connection(cls) -> MongoConnection:
        return cls.connection or get_default_connection()

    @classmethod
    def get_collection(cls) -> AsyncIOMotorCollection:
        """
        Resolve the backing collection.

        Raises:
            ConfigurationError: If the class declares no collection_name
            NotConnectedError: If no connection is available
        """
        if not cls.collection_name:
            raise ConfigurationError(
                f"{cls.__name__} does not declare a collection_name",
                config_key="collection_name",
            )
        return cls.get_connection().collection(cls.collection_name)

    @classmethod
    def validate_document(cls, document: Any) -> ValidationResult:
        """Validate a document against the class schema."""
        return validate(document, cls.schema)

    @classmethod
    def from_result(cls, result: Any) -> Any:
        """Wrap document-shaped driver results in instances of this class."""
        return normalize_result(cls, result)[1]

    @classmethod
    def to_id(cls, value: Any) -> Any:
        """
        Convert a value to the identifier type.

        Raises:
            InvalidIdentifierError: If the value cannot be converted
        """
        if value is None:
            raise InvalidIdentifierError(
                f"Missing {cls.__name__} identifier",
                identifier=value,
                id_class=getattr(cls.id_class, "__name__", str(cls.id_class)),
            )
        try:
            return cls.id_class(value)
        except (InvalidId, TypeError, ValueError) as e:
            raise InvalidIdentifierError(
                f"Invalid {cls.__name__} identifier: {e}",
                identifier=value,
                id_class=getattr(cls.id_class, "__name__", str(cls.id_class)),
            ) from e

    @classmethod
    def _id_filter(cls, value: Any) -> dict[str, Any]:
        return {ID_FIELD: cls.to_id(value)}

    @staticmethod
    def _as_document(document: Any) -> Any:
        if isinstance(document, MongoModel):
            return document.to_dict()
        return document

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    @classmethod
    @timed_operation("models.create_indexes")
    async def create_indexes(
        cls, indexes: list[IndexSpec] | None = None, **kwargs: Any
    ) -> list[str]:
        """
        Create the given indexes, or the class's declared ``indexes``.

        Returns:
            Names of the created indexes; empty when nothing is declared
        """
        models = to_index_models(indexes if indexes is not None else cls.indexes)
        if not models:
            logger.debug(f"No indexes declared for {cls.__name__}; skipping createIndexes")
            return []

        names = await cls.get_collection().create_indexes(models, **kwargs)
        logger.info(f"Created indexes on '{cls.collection_name}': {names}")
        return names

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @classmethod
    async def count(cls, filter: dict[str, Any] | None = None, **kwargs: Any) -> int:
        return await cls.get_collection().count_documents(filter or {}, **kwargs)

    @classmethod
    async def distinct(
        cls, key: str, filter: dict[str, Any] | None = None, **kwargs: Any
    ) -> list[Any]:
        return await cls.get_collection().distinct(key, filter, **kwargs)

    @classmethod
    async def find(
        cls, filter: dict[str, Any] | None = None, options: FindOptions | None = None
    ) -> list[dict[str, Any]]:
        """Return every matching document as a list."""
        options = options or FindOptions()
        cursor = cls.get_collection().find(filter or {}, **options.to_kwargs())
        return await cursor.to_list(length=None)

    @classmethod
    async def find_one(
        cls, filter: dict[str, Any] | None = None, options: FindOptions | None = None
    ) -> dict[str, Any] | None:
        options = options or FindOptions()
        return await cls.get_collection().find_one(filter or {}, **options.to_kwargs())

    @classmethod
    async def find_by_id(cls, id: Any, options: FindOptions | None = None) -> dict[str, Any] | None:
        """
        Find a document by identifier.

        Raises:
            InvalidIdentifierError: Before any driver call, for a malformed id
        """
        filter = cls._id_filter(id)
        return await cls.find_one(filter, options)

    @classmethod
    async def paged_find(
        cls,
        filter: dict[str, Any] | None,
        fields: Any,
        sort: Any,
        limit: int,
        page: int,
    ) -> PagedResult:
        """Fetch one page of instances; see ``pagination.paged_find``."""
        return await paged_find(cls, filter, fields, sort, limit, page)

    @classmethod
    async def aggregate_async(
        cls, pipeline: list[dict[str, Any]], **kwargs: Any
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline and return all result documents."""
        cursor = cls.get_collection().aggregate(pipeline, **kwargs)
        return await cursor.to_list(length=None)

    @classmethod
    def aggregate(
        cls,
        pipeline: list[dict[str, Any]],
        callback: Callable[[BaseException | None, list[dict[str, Any]] | None], Any],
        **kwargs: Any,
    ) -> "asyncio.Task[None]":
        """
        Callback flavour of aggregate_async for collaborators that need one.

        Schedules the aggregation on the running loop and calls
        ``callback(error, results)`` when it finishes. Prefer aggregate_async.
        """

        async def run() -> None:
            try:
                results = await cls.aggregate_async(pipeline, **kwargs)
            except Exception as e:
                callback(e, None)
            else:
                callback(None, results)

        return asyncio.ensure_future(run())

    # ------------------------------------------------------------------
    # Find-and-modify
    # ------------------------------------------------------------------

    @classmethod
    async def find_one_and_update(
        cls,
        filter: dict[str, Any],
        update: dict[str, Any],
        options: FindAndModifyOptions | None = None,
    ) -> dict[str, Any] | None:
        """Update one document; returns the updated document unless return_original."""
        options = options or FindAndModifyOptions()
        return await cls.get_collection().find_one_and_update(
            filter, update, **options.to_kwargs()
        )

    @classmethod
    async def find_one_and_replace(
        cls,
        filter: dict[str, Any],
        replacement: Any,
        options: FindAndModifyOptions | None = None,
    ) -> dict[str, Any] | None:
        options = options or FindAndModifyOptions()
        return await cls.get_collection().find_one_and_replace(
            filter, cls._as_document(replacement), **options.to_kwargs()
        )

    @classmethod
    async def find_one_and_delete(
        cls, filter: dict[str, Any], options: DeleteOptions | None = None
    ) -> dict[str, Any] | None:
        options = options or DeleteOptions()
        return await cls.get_collection().find_one_and_delete(filter, **options.to_kwargs())

    @classmethod
    async def find_by_id_and_update(
        cls,
        id: Any,
        update: dict[str, Any],
        options: FindAndModifyOptions | None = None,
    ) -> dict[str, Any] | None:
        filter = cls._id_filter(id)
        return await cls.find_one_and_update(filter, update, options)

    @classmethod
    async def find_by_id_and_delete(
        cls, id: Any, options: DeleteOptions | None = None
    ) -> dict[str, Any] | None:
        filter = cls._id_filter(id)
        return await cls.find_one_and_delete(filter, options)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @classmethod
    async def insert_one(cls, document: Any, **kwargs: Any):
        result = await cls.get_collection().insert_one(cls._as_document(document), **kwargs)
        logger.debug(f"Inserted {cls.__name__} with id={result.inserted_id}")
        return result

    @classmethod
    async def insert_many(cls, documents: list[Any], **kwargs: Any):
        result = await cls.get_collection().insert_many(
            [cls._as_document(doc) for doc in documents], **kwargs
        )
        logger.debug(f"Inserted {len(result.inserted_ids)} {cls.__name__} documents")
        return result

    @classmethod
    async def update_one(
        cls, filter: dict[str, Any], update: dict[str, Any], options: WriteOptions | None = None
    ):
        options = options or WriteOptions()
        return await cls.get_collection().update_one(filter, update, **options.to_kwargs())

    @classmethod
    async def update_many(
        cls, filter: dict[str, Any], update: dict[str, Any], options: WriteOptions | None = None
    ):
        options = options or WriteOptions()
        return await cls.get_collection().update_many(filter, update, **options.to_kwargs())

    @classmethod
    async def replace_one(
        cls, filter: dict[str, Any], replacement: Any, options: WriteOptions | None = None
    ):
        options = options or WriteOptions()
        return await cls.get_collection().replace_one(
            filter, cls._as_document(replacement), **options.to_kwargs()
        )

    @classmethod
    async def delete_one(cls, filter: dict[str, Any], options: DeleteOptions | None = None):
        options = options or DeleteOptions()
        return await cls.get_collection().delete_one(filter, **options.extra)

    @classmethod
    async def delete_many(cls, filter: dict[str, Any], options: DeleteOptions | None = None):
        options = options or DeleteOptions()
        return await cls.get_collection().delete_many(filter, **options.extra)
