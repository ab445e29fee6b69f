"""
Database connection layer.
"""

from .connection import (
    MongoConnection,
    connect,
    disconnect,
    get_default_connection,
    release_default_connection,
    set_default_connection,
)

__all__ = [
    "MongoConnection",
    "connect",
    "disconnect",
    "get_default_connection",
    "release_default_connection",
    "set_default_connection",
]
