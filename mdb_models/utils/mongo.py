"""
MongoDB utility functions for MDB_MODELS.

JSON serialization helpers for documents and model instances.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId


def clean_mongo_value(value: Any) -> Any:
    """
    Convert a BSON value to a JSON-serializable value.

    - ObjectId -> str
    - datetime -> ISO format string
    - Mappings, model instances and lists are processed recursively
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: clean_mongo_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [clean_mongo_value(item) for item in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return clean_mongo_value(to_dict())
    return value


def clean_mongo_doc(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Convert a MongoDB document to JSON-serializable format.

    Example:
        ```python
        clean_mongo_doc({"_id": ObjectId("507f1f77bcf86cd799439011"), "name": "John"})
        # {"_id": "507f1f77bcf86cd799439011", "name": "John"}
        ```
    """
    if doc is None:
        return None
    return clean_mongo_value(doc)


def clean_mongo_docs(docs: list[Any]) -> list[Any]:
    """Apply clean_mongo_value to each document (or model instance) in a list."""
    return [clean_mongo_value(doc) for doc in docs]
