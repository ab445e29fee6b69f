"""
Observability components: contextual logging and operation metrics.
"""

from .logging import (
    ContextualLoggerAdapter,
    get_correlation_id,
    get_logger,
    get_logging_context,
    model_scope,
    set_correlation_id,
)
from .metrics import (
    MetricsCollector,
    OperationStats,
    get_metrics_collector,
    record_operation,
    timed_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationStats",
    "get_metrics_collector",
    "record_operation",
    "timed_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "model_scope",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
]
