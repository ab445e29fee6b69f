"""
Exceptions raised by MDB_MODELS.

All of them derive from ``MongoModelsError`` (itself a ``RuntimeError``).
Errors raised by the MongoDB driver during CRUD operations are not wrapped;
they reach the caller unchanged.
"""

import re
from typing import Any, Dict, Optional

_URI_CREDENTIALS = re.compile(r"(?<=://)[^/@]+@")


def redact_uri(mongo_uri: str) -> str:
    """Replace the ``user:password@`` part of a connection URI."""
    return _URI_CREDENTIALS.sub("***@", mongo_uri)


class MongoModelsError(RuntimeError):
    """
    Base exception for MDB_MODELS errors.

    Attributes:
        message: Error message
        context: Details for logs (collection, model, config key, ...)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def _add_context(self, **values: Any) -> None:
        self.context.update({k: v for k, v in values.items() if v is not None})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} (context: {details})"


class InitializationError(MongoModelsError):
    """
    Connecting to MongoDB failed.

    ``mongo_uri`` keeps the URI as given; the copy in ``context`` has its
    credentials redacted.
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self._add_context(mongo_uri=redact_uri(mongo_uri) if mongo_uri else None, db_name=db_name)
        self.mongo_uri = mongo_uri
        self.db_name = db_name


class ConfigurationError(MongoModelsError):
    """Configuration is missing or invalid, or a model is declared incompletely."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self._add_context(config_key=config_key, config_value=config_value)
        self.config_key = config_key
        self.config_value = config_value


class NotConnectedError(MongoModelsError):
    """A database handle was requested before connect() succeeded."""


class InvalidIdentifierError(MongoModelsError, ValueError):
    """
    A value could not be converted to the model's identifier type.

    Raised by the "by id" operations before any request reaches the driver.
    """

    def __init__(
        self,
        message: str,
        identifier: Any = None,
        id_class: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self._add_context(identifier=repr(identifier), id_class=id_class)
        self.identifier = identifier
        self.id_class = id_class
