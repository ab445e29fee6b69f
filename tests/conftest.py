"""
Pytest configuration and shared fixtures for MDB_MODELS tests.

This module provides:
- Mock motor collection / connection fixtures
- Model class factories bound to the mocks
- Testcontainers fixtures for integration tests
"""

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from mdb_models.database.connection import MongoConnection, set_default_connection
from mdb_models.models import MongoModel

# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


def make_cursor(documents=None) -> MagicMock:
    """Create a mock motor cursor whose to_list() returns ``documents``."""
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=list(documents or []))
    return cursor


@pytest.fixture
def mock_collection() -> MagicMock:
    """Create a mock motor collection."""
    collection = MagicMock()
    collection.name = "users"
    collection.find = MagicMock(return_value=make_cursor())
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_replace = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=["id1", "id2"]))
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=2))
    collection.replace_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    collection.count_documents = AsyncMock(return_value=0)
    collection.distinct = AsyncMock(return_value=[])
    collection.aggregate = MagicMock(return_value=make_cursor())
    collection.create_indexes = AsyncMock(return_value=["username_1"])
    return collection


@pytest.fixture
def mock_connection(mock_collection: MagicMock) -> MagicMock:
    """Create a mock MongoConnection that resolves every name to mock_collection."""
    connection = MagicMock(spec=MongoConnection)
    connection.connected = True
    connection.db_name = "test_db"
    connection.collection.return_value = mock_collection
    connection.connect = AsyncMock()
    connection.disconnect = AsyncMock()
    return connection


@pytest.fixture
def user_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "hasHat": {"type": "boolean"},
        },
        "required": ["name"],
    }


@pytest.fixture
def user_model(mock_connection: MagicMock, user_schema: Dict[str, Any]) -> type:
    """A fresh MongoModel subclass bound to mock_connection."""

    class User(MongoModel):
        collection_name = "users"
        schema = user_schema
        indexes = [{"key": {"username": 1}}]

    User.bind(mock_connection)
    return User


@pytest.fixture(autouse=True)
def reset_default_connection():
    """Make sure no test leaks a process-wide default connection."""
    set_default_connection(None)
    yield
    set_default_connection(None)


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables before each test."""
    for var in [
        "MONGO_URI",
        "DB_NAME",
        "MONGO_MAX_POOL_SIZE",
        "MONGO_MIN_POOL_SIZE",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
        "MONGO_AUTO_INDEX",
    ]:
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    container = MongoDbContainer(image="mongo:7.0")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"MongoDB container unavailable: {e}")

    yield container
    container.stop()


@pytest.fixture
def mongodb_connection_string(mongodb_container) -> str:
    return mongodb_container.get_connection_url()
