"""
Document-backed model classes.

Usage:
    from mdb_models.models import MongoModel

    class User(MongoModel):
        collection_name = "users"
"""

from .adapters import parse_fields, parse_sort
from .base import MongoModel
from .options import (
    DeleteOptions,
    FindAndModifyOptions,
    FindOptions,
    WriteOptions,
    merge_options,
)
from .pagination import ItemInfo, PageInfo, PagedResult, build_pagination, paged_find
from .results import (
    DriverResult,
    Found,
    Many,
    NotFound,
    Passthrough,
    WriteResult,
    classify_result,
    normalize_result,
    result_factory,
)
from .validation import ValidationResult, validate

__all__ = [
    "MongoModel",
    # Adapters
    "parse_fields",
    "parse_sort",
    # Options
    "FindOptions",
    "FindAndModifyOptions",
    "WriteOptions",
    "DeleteOptions",
    "merge_options",
    # Pagination
    "PageInfo",
    "ItemInfo",
    "PagedResult",
    "build_pagination",
    "paged_find",
    # Results
    "DriverResult",
    "Found",
    "NotFound",
    "Many",
    "WriteResult",
    "Passthrough",
    "classify_result",
    "normalize_result",
    "result_factory",
    # Validation
    "ValidationResult",
    "validate",
]
