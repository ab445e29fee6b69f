"""
Constants for MDB_MODELS.

This module contains shared defaults used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# CONNECTION CONSTANTS
# ============================================================================

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

MIN_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 1000
"""Lowest accepted server selection timeout (milliseconds)."""

DEFAULT_APP_NAME: Final[str] = "MDB_MODELS"
"""Application name reported to the server by the motor client."""

# ============================================================================
# MODEL CONSTANTS
# ============================================================================

ID_FIELD: Final[str] = "_id"
"""Primary key field of every MongoDB document."""

FIND_AND_MODIFY_VALUE_KEY: Final[str] = "value"
"""Key holding the document in a find-and-modify response."""

WRITE_RESULT_OPS_KEY: Final[str] = "ops"
"""Key holding the affected documents in a legacy write-result envelope."""

ASCENDING: Final[int] = 1
"""Sort direction for unprefixed sort tokens."""

DESCENDING: Final[int] = -1
"""Sort direction for ``-`` prefixed sort tokens."""

EXCLUDE_PREFIX: Final[str] = "-"
"""Token prefix that excludes a field or sorts it descending."""

# ============================================================================
# PLUGIN CONSTANTS
# ============================================================================

PLUGIN_STATE_KEY: Final[str] = "mongo_models"
"""Attribute on ``app.state`` holding the registered plugin."""

# ============================================================================
# METRICS CONSTANTS
# ============================================================================

DEFAULT_MAX_METRICS: Final[int] = 10000
"""Maximum number of distinct metric keys kept before LRU eviction."""
