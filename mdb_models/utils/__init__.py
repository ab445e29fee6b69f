"""
Utility functions and helpers for MDB_MODELS.
"""

from .mongo import clean_mongo_doc, clean_mongo_docs, clean_mongo_value

__all__ = ["clean_mongo_doc", "clean_mongo_docs", "clean_mongo_value"]
