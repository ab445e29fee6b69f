"""
Index declaration helpers.
"""

from .helpers import IndexSpec, is_id_index, normalize_keys, to_index_model, to_index_models

__all__ = [
    "IndexSpec",
    "is_id_index",
    "normalize_keys",
    "to_index_model",
    "to_index_models",
]
