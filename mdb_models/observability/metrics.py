"""
Operation metrics for MDB_MODELS.

Each entry is keyed by operation name and, where one applies, the
collection it ran against ("models.paged_find:users"). The collector keeps
at most ``max_entries`` keys and drops the least recently touched first.
"""

import functools
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..constants import DEFAULT_MAX_METRICS

logger = logging.getLogger(__name__)


def _key(operation: str, collection: str | None) -> str:
    return f"{operation}:{collection}" if collection else operation


@dataclass
class OperationStats:
    operation: str
    collection: str | None = None
    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    slowest_ms: float = 0.0
    last_error: str | None = None
    last_called: datetime | None = None

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    def add(self, duration_ms: float, error: BaseException | None = None) -> None:
        self.calls += 1
        self.total_ms += duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)
        if error is not None:
            self.failures += 1
            self.last_error = type(error).__name__
        self.last_called = datetime.now()

    def as_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "collection": self.collection,
            "calls": self.calls,
            "failures": self.failures,
            "mean_ms": round(self.mean_ms, 2),
            "slowest_ms": round(self.slowest_ms, 2),
            "last_error": self.last_error,
            "last_called": self.last_called.isoformat() if self.last_called else None,
        }


class MetricsCollector:
    """Thread-safe, size-bounded store of ``OperationStats``."""

    def __init__(self, max_entries: int = DEFAULT_MAX_METRICS):
        self._entries: OrderedDict[str, OperationStats] = OrderedDict()
        self._lock = threading.Lock()
        self._max_entries = max_entries

    def record(
        self,
        operation: str,
        duration_ms: float,
        error: BaseException | None = None,
        collection: str | None = None,
    ) -> None:
        """
        Add one execution of ``operation``.

        Args:
            operation: Dotted operation name, e.g. "models.paged_find"
            duration_ms: Wall time in milliseconds
            error: The exception the operation raised, if it failed
            collection: Collection the operation ran against
        """
        key = _key(operation, collection)
        with self._lock:
            stats = self._entries.get(key)
            if stats is None:
                if len(self._entries) >= self._max_entries:
                    self._entries.popitem(last=False)
                stats = self._entries[key] = OperationStats(operation, collection)
            else:
                self._entries.move_to_end(key)
            stats.add(duration_ms, error)

    def snapshot(self, prefix: str | None = None) -> dict[str, dict[str, Any]]:
        """Entries as plain dicts, optionally only keys starting with ``prefix``."""
        with self._lock:
            return {
                key: stats.as_dict()
                for key, stats in self._entries.items()
                if prefix is None or key.startswith(prefix)
            }

    def calls(self, operation: str) -> int:
        """Executions of ``operation`` summed over every collection."""
        with self._lock:
            return sum(s.calls for s in self._entries.values() if s.operation == operation)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()


_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create the process-wide collector."""
    global _collector
    if _collector is None:
        _collector = MetricsCollector()
    return _collector


def record_operation(
    operation: str,
    duration_ms: float,
    error: BaseException | None = None,
    collection: str | None = None,
) -> None:
    get_metrics_collector().record(operation, duration_ms, error, collection)


def timed_operation(operation: str):
    """
    Time a model classmethod coroutine.

    The collection is taken from the ``collection_name`` of the first
    positional argument when it has one. Exceptions are recorded and
    re-raised unchanged.

    Usage:
        @classmethod
        @timed_operation("models.create_indexes")
        async def create_indexes(cls, ...):
            ...
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            collection = getattr(args[0], "collection_name", None) if args else None
            start_time = time.time()
            error: BaseException | None = None
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                error = e
                raise
            finally:
                duration_ms = (time.time() - start_time) * 1000
                record_operation(operation, duration_ms, error, collection)

        return wrapper

    return decorator
