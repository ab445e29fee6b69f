"""
FastAPI integration for MDB_MODELS.

``MongoModelsPlugin`` owns the connection for a web application: it
connects on startup, binds every registered model class to that connection,
creates declared indexes (unless ``auto_index`` is off) and disconnects on
shutdown.

Usage:
    from fastapi import FastAPI
    from mdb_models import ModelsConfig, MongoModelsPlugin

    plugin = MongoModelsPlugin(ModelsConfig(), models={"User": User})
    app = FastAPI(lifespan=plugin.lifespan)

    # Other routers may add their models before startup
    plugin.add_model("Post", Post)
"""

import importlib
import logging
import time
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from typing import Any, Union

from .config import ModelsConfig
from .constants import PLUGIN_STATE_KEY
from .database.connection import (
    MongoConnection,
    release_default_connection,
    set_default_connection,
)
from .exceptions import ConfigurationError, NotConnectedError
from .models import MongoModel
from .observability import get_logger as get_contextual_logger
from .observability import model_scope, record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

# A model class or its import path
ModelRef = Union[type[MongoModel], str]


def resolve_model(name: str, path: str) -> Any:
    """Import the object named by ``path`` ("package.module:ClassName")."""
    module_path, sep, attr = path.partition(":")
    if not sep:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise ConfigurationError(
            f"Model '{name}' path must look like 'package.module:ClassName'",
            config_key="models",
            config_value=path,
        )
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import module for model '{name}': {e}",
            config_key="models",
            config_value=path,
        ) from e
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ConfigurationError(
            f"Module '{module_path}' has no attribute '{attr}' for model '{name}'",
            config_key="models",
            config_value=path,
        ) from None


class ModelRegistry:
    """Named model classes exposed by the plugin."""

    def __init__(self, models: dict[str, ModelRef] | None = None) -> None:
        self._models: dict[str, type[MongoModel]] = {}
        for name, model in (models or {}).items():
            self.add_model(name, model)

    def add_model(self, name: str, model: ModelRef) -> type[MongoModel]:
        """
        Register a model under ``name``; re-registering replaces it.

        ``model`` is either the class or its import path
        ("package.module:ClassName", or "package.module.ClassName").

        Returns:
            The registered class

        Raises:
            ConfigurationError: If an import path cannot be resolved
            TypeError: If the model is not a MongoModel subclass
        """
        model_cls = resolve_model(name, model) if isinstance(model, str) else model
        if not (isinstance(model_cls, type) and issubclass(model_cls, MongoModel)):
            raise TypeError(f"Model '{name}' must be a MongoModel subclass, got {model_cls!r}")
        self._models[name] = model_cls
        return model_cls

    def get(self, name: str) -> type[MongoModel]:
        """
        Raises:
            KeyError: If no model is registered under ``name``
        """
        return self._models[name]

    def names(self) -> list[str]:
        return list(self._models)

    def models(self) -> list[type[MongoModel]]:
        return list(self._models.values())

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)


class MongoModelsPlugin:
    """
    Connection and model lifecycle for a FastAPI application.
    """

    def __init__(
        self,
        config: ModelsConfig | None = None,
        models: dict[str, ModelRef] | None = None,
    ) -> None:
        self.config = config or ModelsConfig()
        self.registry = ModelRegistry(models)
        self._connection: MongoConnection | None = None

    def register(self, app: Any) -> "MongoModelsPlugin":
        """Expose the plugin on ``app.state`` for dependencies."""
        setattr(app.state, PLUGIN_STATE_KEY, self)
        return self

    def add_model(self, name: str, model: ModelRef) -> None:
        """Register a model; models added after startup are bound immediately."""
        model_cls = self.registry.add_model(name, model)
        if self._connection is not None:
            model_cls.bind(self._connection)

    def get_model(self, name: str) -> type[MongoModel]:
        return self.registry.get(name)

    @property
    def started(self) -> bool:
        return self._connection is not None and self._connection.connected

    @property
    def connection(self) -> MongoConnection:
        """
        Raises:
            NotConnectedError: Before startup() succeeded
        """
        if self._connection is None:
            raise NotConnectedError("MongoModelsPlugin has not been started")
        return self._connection

    async def startup(self) -> None:
        """
        Connect, bind models and create their indexes.

        Raises:
            ConfigurationError: If the configuration is invalid
            InitializationError: If the connection fails

        A failure while binding models or creating indexes disconnects
        again and re-raises, leaving the plugin unstarted.
        """
        if self._connection is not None:
            logger.warning("MongoModelsPlugin already started. Skipping startup.")
            return

        start_time = time.time()
        self.config.validate()

        connection = MongoConnection(**self.config.connection_kwargs())
        await connection.connect()
        self._connection = connection
        set_default_connection(connection)

        try:
            for model_cls in self.registry.models():
                model_cls.bind(connection)
            if self.config.auto_index:
                await self._create_indexes()
            else:
                logger.info("Automatic index creation disabled")
        except Exception:
            logger.exception("MongoModelsPlugin startup failed; rolling back")
            await self.shutdown()
            raise

        duration_ms = (time.time() - start_time) * 1000
        record_operation("plugin.startup", duration_ms)
        contextual_logger.info(
            "MongoModelsPlugin started",
            extra={
                "db_name": self.config.db_name,
                "models": self.registry.names(),
                "duration_ms": round(duration_ms, 2),
            },
        )

    async def _create_indexes(self) -> None:
        for name in self.registry.names():
            model_cls = self.registry.get(name)
            if not model_cls.indexes:
                logger.debug(f"Model '{name}' declares no indexes")
                continue
            with model_scope(model_cls):
                await model_cls.create_indexes()

    async def shutdown(self) -> None:
        """Disconnect and unbind models. Safe to call more than once."""
        connection = self._connection
        if connection is None:
            return

        for model_cls in self.registry.models():
            if model_cls.connection is connection:
                model_cls.bind(None)

        release_default_connection(connection)

        self._connection = None
        await connection.disconnect()
        contextual_logger.info("MongoModelsPlugin stopped")

    @asynccontextmanager
    async def lifespan(self, app: Any) -> AsyncIterator[None]:
        """Lifespan handler for ``FastAPI(lifespan=plugin.lifespan)``."""
        self.register(app)
        await self.startup()
        try:
            yield
        finally:
            await self.shutdown()
