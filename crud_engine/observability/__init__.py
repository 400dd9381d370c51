"""
Observability components.

Contextual logging (correlation id plus the record operation in progress)
and in-process operation metrics.
"""

from .logging import (
    ContextualLoggerAdapter,
    clear_correlation_id,
    current_context,
    get_correlation_id,
    get_logger,
    log_operation,
    operation_context,
    set_correlation_id,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "operation_context",
    "current_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
