"""
Contextual logging for MDB_MODELS.

Records logged through ``get_logger`` carry the request correlation ID and,
inside ``model_scope``, the model and collection being worked on.
"""

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "mdb_models_correlation_id", default=None
)

# (model class name, collection name)
_current_model: contextvars.ContextVar[tuple[str, str | None] | None] = contextvars.ContextVar(
    "mdb_models_current_model", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context, generating one if omitted."""
    correlation_id = correlation_id or uuid.uuid4().hex
    _correlation_id.set(correlation_id)
    return correlation_id


@contextmanager
def model_scope(model_cls: type) -> Iterator[None]:
    """
    Tag log records emitted inside the block with ``model_cls``.

    Scopes nest; leaving one restores the enclosing model.
    """
    token = _current_model.set(
        (model_cls.__name__, getattr(model_cls, "collection_name", None))
    )
    try:
        yield
    finally:
        _current_model.reset(token)


def get_logging_context() -> dict[str, Any]:
    context: dict[str, Any] = {}
    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    current = _current_model.get()
    if current:
        context["model"], context["collection"] = current
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Merges the logging context under any caller supplied ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})
