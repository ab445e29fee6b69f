"""
Connection lifecycle for MDB_MODELS.

A ``MongoConnection`` owns one motor client and database handle. Model
classes either carry their own connection or fall back to the process-wide
default installed by the module-level ``connect()``.

Usage:
    from mdb_models.database import connect, disconnect

    await connect("mongodb://localhost:27017", "my_db")
    ...
    await disconnect()
"""

import logging
import time
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import ConnectionFailure, OperationFailure, ServerSelectionTimeoutError

from ..constants import (
    DEFAULT_APP_NAME,
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from ..exceptions import InitializationError, NotConnectedError, redact_uri
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class MongoConnection:
    """
    Owns a MongoDB client and database handle with an explicit
    connect/disconnect lifecycle.

    The handle is published only after the server answered a ping, so a
    failed ``connect()`` leaves the connection exactly as it was.
    """

    def __init__(
        self,
        mongo_uri: str,
        db_name: str,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
        server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        **client_options: Any,
    ) -> None:
        """
        Args:
            mongo_uri: MongoDB connection URI
            db_name: Database name
            max_pool_size: Maximum MongoDB connection pool size
            min_pool_size: Minimum MongoDB connection pool size
            server_selection_timeout_ms: Server selection timeout in milliseconds
            **client_options: Extra keyword arguments for AsyncIOMotorClient
        """
        self.mongo_uri = mongo_uri
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.min_pool_size = min_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.client_options = client_options

        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None

    def _build_client(self) -> AsyncIOMotorClient:
        options = {
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "appname": DEFAULT_APP_NAME,
            "maxPoolSize": self.max_pool_size,
            "minPoolSize": self.min_pool_size,
            "maxIdleTimeMS": DEFAULT_MAX_IDLE_TIME_MS,
        }
        options.update(self.client_options)
        return AsyncIOMotorClient(self.mongo_uri, **options)

    async def connect(self) -> AsyncIOMotorDatabase:
        """
        Connect to MongoDB and verify the server is reachable.

        Connecting an already connected instance returns the existing handle.

        Returns:
            The database handle

        Raises:
            InitializationError: If the client cannot be created or the ping fails
        """
        if self._db is not None:
            logger.warning("MongoConnection already connected. Skipping reconnect.")
            return self._db

        start_time = time.time()
        contextual_logger.info(
            "Connecting to MongoDB",
            extra={
                "mongo_uri": redact_uri(self.mongo_uri),
                "db_name": self.db_name,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

        client: AsyncIOMotorClient | None = None
        try:
            client = self._build_client()
            await client.admin.command("ping")
        except (
            ConnectionFailure,
            ServerSelectionTimeoutError,
            OperationFailure,
            PyMongoConfigurationError,
            TypeError,
            ValueError,
        ) as e:
            if client is not None:
                client.close()
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.connect", duration_ms, error=e)
            contextual_logger.error(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise InitializationError(
                f"Failed to connect to MongoDB: {e}",
                mongo_uri=self.mongo_uri,
                db_name=self.db_name,
                context={"error_type": type(e).__name__},
            ) from e

        self._client = client
        self._db = client[self.db_name]

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.connect", duration_ms)
        contextual_logger.info(
            "MongoDB connection established",
            extra={
                "db_name": self.db_name,
                "pool_size": f"{self.min_pool_size}-{self.max_pool_size}",
                "duration_ms": round(duration_ms, 2),
            },
        )
        return self._db

    async def disconnect(self) -> None:
        """
        Close the client. Safe to call more than once.
        """
        if self._client is None:
            return

        start_time = time.time()
        self._client.close()
        self._client = None
        self._db = None

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.disconnect", duration_ms)
        contextual_logger.info(
            "MongoDB connection closed",
            extra={"db_name": self.db_name, "duration_ms": round(duration_ms, 2)},
        )

    @property
    def connected(self) -> bool:
        return self._db is not None

    @property
    def client(self) -> AsyncIOMotorClient:
        """
        Raises:
            NotConnectedError: If connect() has not succeeded
        """
        if self._client is None:
            raise NotConnectedError(
                "MongoConnection not connected. Call connect() first.",
                context={"db_name": self.db_name},
            )
        return self._client

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """
        Raises:
            NotConnectedError: If connect() has not succeeded
        """
        if self._db is None:
            raise NotConnectedError(
                "MongoConnection not connected. Call connect() first.",
                context={"db_name": self.db_name},
            )
        return self._db

    def collection(self, name: str) -> AsyncIOMotorCollection:
        """Resolve a collection handle by name."""
        return self.db[name]

    def __repr__(self) -> str:
        state = "connected" if self.connected else "disconnected"
        return f"<MongoConnection db_name={self.db_name!r} {state}>"


# Process-wide default connection
_default_connection: MongoConnection | None = None


def get_default_connection() -> MongoConnection:
    """
    Return the process-wide default connection.

    Raises:
        NotConnectedError: If connect() has not been called
    """
    if _default_connection is None:
        raise NotConnectedError("No default MongoDB connection. Call connect() first.")
    return _default_connection


def set_default_connection(connection: MongoConnection | None) -> None:
    """Install (or clear, with None) the process-wide default connection."""
    global _default_connection
    _default_connection = connection


async def connect(mongo_uri: str, db_name: str, **options: Any) -> MongoConnection:
    """
    Connect and install the result as the process-wide default connection.

    A previous default is closed only after the new connection succeeded; on
    failure the previous default stays in place.

    Args:
        mongo_uri: MongoDB connection URI
        db_name: Database name
        **options: MongoConnection keyword arguments

    Returns:
        The connected MongoConnection

    Raises:
        InitializationError: If the connection fails
    """
    connection = MongoConnection(mongo_uri, db_name, **options)
    await connection.connect()

    previous = _default_connection
    set_default_connection(connection)
    if previous is not None and previous is not connection:
        await previous.disconnect()
    return connection


async def disconnect() -> None:
    """Close and clear the process-wide default connection, if any."""
    connection = _default_connection
    set_default_connection(None)
    if connection is not None:
        await connection.disconnect()


def release_default_connection(connection: MongoConnection) -> bool:
    """
    Clear the process-wide default if it is ``connection``.

    Returns:
        True if the default was cleared
    """
    if _default_connection is connection:
        set_default_connection(None)
        return True
    return False
