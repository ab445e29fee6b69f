"""
Configuration management for MDB_MODELS.

Constructor arguments take precedence over environment variables, so the
models plugin can be configured either way:

    # Using environment variables
    config = ModelsConfig()

    # Or using direct parameters
    config = ModelsConfig(mongo_uri="mongodb://localhost:27017", db_name="my_db")
"""

import os
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    MIN_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _int_setting(value: Optional[int], env_name: str, default: int) -> int:
    """An explicit argument (including 0) wins over the environment."""
    if value is not None:
        return value
    return int(os.getenv(env_name, str(default)))


class ModelsConfig:
    """
    Connection and plugin configuration.

    Attributes:
        mongo_uri: MongoDB connection URI (MONGO_URI)
        db_name: Database name (DB_NAME)
        max_pool_size: Maximum connection pool size (MONGO_MAX_POOL_SIZE)
        min_pool_size: Minimum connection pool size (MONGO_MIN_POOL_SIZE)
        server_selection_timeout_ms: Server selection timeout
            (MONGO_SERVER_SELECTION_TIMEOUT_MS)
        auto_index: Create declared model indexes on startup (MONGO_AUTO_INDEX)
        client_options: Extra keyword arguments passed to the motor client
    """

    def __init__(
        self,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        max_pool_size: Optional[int] = None,
        min_pool_size: Optional[int] = None,
        server_selection_timeout_ms: Optional[int] = None,
        auto_index: Optional[bool] = None,
        client_options: Optional[Dict[str, Any]] = None,
    ):
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", "")
        self.db_name = db_name or os.getenv("DB_NAME", "")
        self.max_pool_size = _int_setting(
            max_pool_size, "MONGO_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE
        )
        self.min_pool_size = _int_setting(
            min_pool_size, "MONGO_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE
        )
        self.server_selection_timeout_ms = _int_setting(
            server_selection_timeout_ms,
            "MONGO_SERVER_SELECTION_TIMEOUT_MS",
            DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        )
        self.auto_index = (
            auto_index if auto_index is not None else _env_bool("MONGO_AUTO_INDEX", True)
        )
        self.client_options = dict(client_options or {})

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="mongo_uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 1:
            raise ConfigurationError(
                f"min_pool_size must be >= 1, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < MIN_SERVER_SELECTION_TIMEOUT_MS:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= {MIN_SERVER_SELECTION_TIMEOUT_MS}, "
                f"got {self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

    def connection_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for MongoConnection built from this configuration."""
        return {
            "mongo_uri": self.mongo_uri,
            "db_name": self.db_name,
            "max_pool_size": self.max_pool_size,
            "min_pool_size": self.min_pool_size,
            "server_selection_timeout_ms": self.server_selection_timeout_ms,
            **self.client_options,
        }
