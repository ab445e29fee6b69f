"""
Unit tests for the FastAPI models plugin and its dependencies.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import OperationFailure

from mdb_models.config import ModelsConfig
from mdb_models.database.connection import get_default_connection
from mdb_models.dependencies import model_dependency
from mdb_models.exceptions import ConfigurationError, InitializationError, NotConnectedError
from mdb_models.models import MongoModel
from mdb_models.observability import get_correlation_id
from mdb_models.plugin import ModelRegistry, MongoModelsPlugin

from ..fixtures import dummy_model


@pytest.fixture
def config() -> ModelsConfig:
    return ModelsConfig(mongo_uri="mongodb://localhost:27017", db_name="test_db")


@pytest.fixture
def patched_connection(mock_connection):
    """Make the plugin build mock_connection instead of a real one."""
    with patch("mdb_models.plugin.MongoConnection", return_value=mock_connection) as factory:
        yield factory


def make_models():
    class Dummy(MongoModel):
        collection_name = "dummies"
        indexes = [{"key": {"name": 1}}]

    class NoIndex(MongoModel):
        collection_name = "noindexes"

    return Dummy, NoIndex


class TestModelRegistry:
    """Test named model registration."""

    def test_add_and_get(self):
        Dummy, NoIndex = make_models()
        registry = ModelRegistry({"Dummy": Dummy})
        registry.add_model("NoIndex", NoIndex)

        assert registry.get("Dummy") is Dummy
        assert "NoIndex" in registry
        assert registry.names() == ["Dummy", "NoIndex"]
        assert len(registry) == 2

    def test_rejects_non_models(self):
        with pytest.raises(TypeError):
            ModelRegistry().add_model("Bad", dict)

    def test_import_path(self):
        registry = ModelRegistry({"Dummy": "tests.fixtures.dummy_model:Dummy"})

        assert registry.get("Dummy") is dummy_model.Dummy

    def test_dotted_import_path(self):
        registry = ModelRegistry()

        assert registry.add_model("Dummy", "tests.fixtures.dummy_model.Dummy") is dummy_model.Dummy

    @pytest.mark.parametrize(
        "path",
        [
            "tests.fixtures.missing_module:Dummy",
            "tests.fixtures.dummy_model:Missing",
            "Dummy",
        ],
    )
    def test_unresolvable_import_path(self, path):
        with pytest.raises(ConfigurationError) as exc_info:
            ModelRegistry().add_model("Dummy", path)
        assert exc_info.value.config_value == path

    def test_import_path_must_name_a_model(self):
        with pytest.raises(TypeError):
            ModelRegistry().add_model("Dummy", "tests.fixtures.dummy_model:NOT_A_MODEL")

    def test_unknown_model(self):
        with pytest.raises(KeyError):
            ModelRegistry().get("Missing")


class TestPluginLifecycle:
    """Test startup and shutdown."""

    @pytest.mark.asyncio
    async def test_startup_binds_models_and_creates_indexes(
        self, config, mock_connection, mock_collection, patched_connection
    ):
        Dummy, NoIndex = make_models()
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy, "NoIndex": NoIndex})

        await plugin.startup()

        patched_connection.assert_called_once_with(**config.connection_kwargs())
        mock_connection.connect.assert_awaited_once()
        assert plugin.started
        assert Dummy.connection is mock_connection
        assert NoIndex.connection is mock_connection
        assert get_default_connection() is mock_connection
        mock_collection.create_indexes.assert_awaited_once()
        mock_connection.collection.assert_any_call("dummies")

        await plugin.shutdown()

        mock_connection.disconnect.assert_awaited_once()
        assert Dummy.connection is None
        with pytest.raises(NotConnectedError):
            get_default_connection()

    @pytest.mark.asyncio
    async def test_auto_index_disabled(self, mock_collection, patched_connection):
        Dummy, _ = make_models()
        config = ModelsConfig(
            mongo_uri="mongodb://localhost:27017", db_name="test_db", auto_index=False
        )
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})

        await plugin.startup()

        mock_collection.create_indexes.assert_not_awaited()
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_connect_failure(self, config, mock_connection, patched_connection):
        Dummy, _ = make_models()
        mock_connection.connect = AsyncMock(side_effect=InitializationError("connect failed"))
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})

        with pytest.raises(InitializationError):
            await plugin.startup()

        assert not plugin.started
        assert Dummy.connection is None
        with pytest.raises(NotConnectedError):
            plugin.connection

    @pytest.mark.asyncio
    async def test_model_added_after_startup_is_bound(
        self, config, mock_connection, patched_connection
    ):
        Dummy, NoIndex = make_models()
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})
        await plugin.startup()

        plugin.add_model("NoIndex", NoIndex)

        assert NoIndex.connection is mock_connection
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_index_failure_rolls_back_startup(
        self, config, mock_connection, mock_collection, patched_connection
    ):
        Dummy, _ = make_models()
        mock_collection.create_indexes = AsyncMock(
            side_effect=OperationFailure("E11000 duplicate key error")
        )
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})

        with pytest.raises(OperationFailure):
            await plugin.startup()

        assert not plugin.started
        assert Dummy.connection is None
        mock_connection.disconnect.assert_awaited_once()
        with pytest.raises(NotConnectedError):
            get_default_connection()

        mock_collection.create_indexes = AsyncMock(return_value=["name_1"])
        await plugin.startup()

        assert plugin.started
        mock_collection.create_indexes.assert_awaited_once()
        await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_startup_with_import_path(self, config, mock_connection, patched_connection):
        plugin = MongoModelsPlugin(config, models={"Dummy": "tests.fixtures.dummy_model:Dummy"})

        await plugin.startup()

        assert plugin.get_model("Dummy") is dummy_model.Dummy
        assert dummy_model.Dummy.connection is mock_connection
        await plugin.shutdown()
        assert dummy_model.Dummy.connection is None

    @pytest.mark.asyncio
    async def test_shutdown_before_startup(self, config):
        await MongoModelsPlugin(config).shutdown()


class TestFastAPIIntegration:
    """Test the lifespan handler and dependencies inside an application."""

    def test_exposes_models_to_routes(self, config, mock_collection, patched_connection):
        Dummy, _ = make_models()
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})
        app = FastAPI(lifespan=plugin.lifespan)
        mock_collection.count_documents = AsyncMock(return_value=3)

        @app.get("/dummies/count")
        async def count_dummies(model=Depends(model_dependency("Dummy"))):
            return {"count": await model.count()}

        with TestClient(app) as client:
            assert app.state.mongo_models is plugin
            response = client.get("/dummies/count")

        assert response.status_code == 200
        assert response.json() == {"count": 3}

    def test_models_added_by_another_router_before_startup(
        self, config, mock_collection, patched_connection
    ):
        Dummy, _ = make_models()
        plugin = MongoModelsPlugin(config)
        app = FastAPI(lifespan=plugin.lifespan)
        plugin.add_model("Dummy", Dummy)

        @app.get("/dummies")
        async def list_dummies(model=Depends(model_dependency("Dummy"))):
            return {"model": model.__name__}

        with TestClient(app) as client:
            response = client.get("/dummies")

        assert response.json() == {"model": "Dummy"}
        mock_collection.create_indexes.assert_awaited_once()

    def test_unknown_model_is_server_error(self, config, patched_connection):
        plugin = MongoModelsPlugin(config)
        app = FastAPI(lifespan=plugin.lifespan)

        @app.get("/missing")
        async def missing(model=Depends(model_dependency("Missing"))):
            return {}

        with TestClient(app) as client:
            response = client.get("/missing")

        assert response.status_code == 500
        assert "Missing" in response.json()["detail"]

    def test_plugin_not_registered(self):
        app = FastAPI()

        @app.get("/dummies")
        async def list_dummies(model=Depends(model_dependency("Dummy"))):
            return {}

        response = TestClient(app).get("/dummies")

        assert response.status_code == 503

    def test_correlation_id_from_request_header(self, config, patched_connection):
        Dummy, _ = make_models()
        plugin = MongoModelsPlugin(config, models={"Dummy": Dummy})
        app = FastAPI(lifespan=plugin.lifespan)

        @app.get("/dummies/trace")
        async def trace(model=Depends(model_dependency("Dummy"))):
            return {"correlation_id": get_correlation_id()}

        with TestClient(app) as client:
            tagged = client.get("/dummies/trace", headers={"X-Request-ID": "req-42"})
            untagged = client.get("/dummies/trace")

        assert tagged.json() == {"correlation_id": "req-42"}
        assert untagged.json()["correlation_id"] not in (None, "req-42")
