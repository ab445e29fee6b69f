"""
Helper functions for model index declarations.

Models declare indexes either as ``pymongo.IndexModel`` instances or as
plain dictionaries in the server's ``createIndexes`` shape:

    indexes = [
        {"key": {"username": 1}, "unique": True},
        {"key": [("created_at", -1)], "name": "created_desc"},
    ]
"""

import logging
from typing import Any

from pymongo import IndexModel

logger = logging.getLogger(__name__)

IndexSpec = IndexModel | dict[str, Any]


def normalize_keys(
    keys: dict[str, Any] | list[tuple[str, Any]] | str,
) -> list[tuple[str, Any]]:
    """
    Normalize index keys to a list of (field_name, direction) tuples.

    A bare field name means an ascending single-field index.
    """
    if isinstance(keys, str):
        return [(keys, 1)]
    if isinstance(keys, dict):
        return list(keys.items())
    return [tuple(k) for k in keys]


def is_id_index(keys: dict[str, Any] | list[tuple[str, Any]]) -> bool:
    """Check if index keys target only the _id field (MongoDB creates it automatically)."""
    normalized = normalize_keys(keys)
    return len(normalized) == 1 and normalized[0][0] == "_id"


def to_index_model(spec: IndexSpec) -> IndexModel:
    """
    Convert an index declaration into a ``pymongo.IndexModel``.

    Raises:
        ValueError: If a dictionary declaration has no ``key`` entry
    """
    if isinstance(spec, IndexModel):
        return spec

    options = dict(spec)
    keys = options.pop("key", None) or options.pop("keys", None)
    if not keys:
        raise ValueError(f"Index declaration requires a 'key' entry: {spec!r}")
    return IndexModel(normalize_keys(keys), **options)


def to_index_models(specs: list[IndexSpec]) -> list[IndexModel]:
    """Convert index declarations, dropping redundant ``_id`` indexes."""
    models = []
    for spec in specs:
        model = to_index_model(spec)
        if is_id_index(list(model.document["key"].items())):
            logger.debug("Skipping declared _id index; MongoDB creates it automatically")
            continue
        models.append(model)
    return models
