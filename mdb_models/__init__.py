"""
MDB_MODELS - MongoDB model classes

Connection lifecycle, schema validation, CRUD passthroughs, paged queries
and field/sort string parsing for motor-backed model classes.
"""

from bson import ObjectId

from .config import ModelsConfig
from .database import MongoConnection, connect, disconnect, get_default_connection
from .exceptions import (
    ConfigurationError,
    InitializationError,
    InvalidIdentifierError,
    MongoModelsError,
    NotConnectedError,
)
from .models import (
    DeleteOptions,
    FindAndModifyOptions,
    FindOptions,
    MongoModel,
    PagedResult,
    WriteOptions,
    normalize_result,
    parse_fields,
    parse_sort,
)
from .dependencies import get_models_plugin, model_dependency
from .plugin import ModelRegistry, MongoModelsPlugin

__version__ = "0.2.0"

__all__ = [
    # Models
    "MongoModel",
    "PagedResult",
    "FindOptions",
    "FindAndModifyOptions",
    "WriteOptions",
    "DeleteOptions",
    "normalize_result",
    "parse_fields",
    "parse_sort",
    "ObjectId",
    # Connection
    "MongoConnection",
    "connect",
    "disconnect",
    "get_default_connection",
    # Configuration
    "ModelsConfig",
    # Plugin
    "ModelRegistry",
    "MongoModelsPlugin",
    "get_models_plugin",
    "model_dependency",
    # Errors
    "MongoModelsError",
    "InitializationError",
    "ConfigurationError",
    "NotConnectedError",
    "InvalidIdentifierError",
]
