"""
FastAPI dependencies for MDB_MODELS.

Usage:
    from fastapi import Depends
    from mdb_models.dependencies import model_dependency

    @app.get("/users")
    async def list_users(page: int = 1, User=Depends(model_dependency("User"))):
        result = await User.paged_find({}, "", "-_id", limit=20, page=page)
        return result.to_json()
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import HTTPException, Request

from .constants import PLUGIN_STATE_KEY
from .models import MongoModel
from .observability import set_correlation_id
from .plugin import MongoModelsPlugin

logger = logging.getLogger(__name__)


async def get_models_plugin(request: Request) -> MongoModelsPlugin:
    """
    Get the started MongoModelsPlugin from app state.

    Also sets the logging correlation ID from the ``X-Request-ID`` header,
    generating one when the header is absent.
    """
    set_correlation_id(request.headers.get("x-request-id"))
    plugin = getattr(request.app.state, PLUGIN_STATE_KEY, None)
    if plugin is None:
        raise HTTPException(503, "Models plugin not registered")
    if not plugin.started:
        raise HTTPException(503, "Models plugin not started")
    return plugin


def model_dependency(name: str) -> Callable[[Request], Awaitable[type[MongoModel]]]:
    """Build a dependency resolving the model class registered under ``name``."""

    async def resolve_model(request: Request) -> type[MongoModel]:
        plugin = await get_models_plugin(request)
        try:
            return plugin.get_model(name)
        except KeyError:
            logger.error(f"Model '{name}' is not registered with the models plugin")
            raise HTTPException(500, f"Model '{name}' is not registered") from None

    return resolve_model
