"""
Contextual logging for CRUD_ENGINE.

Two context variables follow a request through the engine: the
correlation id set by the HTTP middleware, and the record operation in
progress (model, action, principal). Loggers from ``get_logger`` attach
both to every record they emit as ``extra`` attributes.
"""

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "crud_engine_correlation_id", default=None
)

_operation: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "crud_engine_operation", default=None
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation id to the current context.

    Args:
        correlation_id: Id supplied by the caller; a UUID4 is generated if None

    Returns:
        The id now in effect
    """
    correlation_id = correlation_id or str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def operation_context(
    model_name: str, action: str, principal_id: Any = None
) -> Iterator[None]:
    """
    Bind the record operation in progress for the duration of the block.

    The previous binding is restored on exit, so contexts nest.
    """
    token = _operation.set(
        {"model_name": model_name, "action": action, "principal_id": principal_id}
    )
    try:
        yield
    finally:
        _operation.reset(token)


def current_context() -> dict[str, Any]:
    """Correlation id and operation fields currently bound (possibly empty)."""
    context = dict(_operation.get() or {})
    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Adds ``current_context()`` to each record; explicit ``extra`` wins."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**current_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    duration_ms: float,
    success: bool = True,
    **details: Any,
) -> None:
    """
    Emit one line for a completed operation.

    Successful operations log at INFO, failed ones at WARNING. ``details``
    are rendered into the message and attached as ``extra`` attributes.
    """
    outcome = "completed" if success else "failed"
    message = f"{operation} {outcome} in {duration_ms:.2f}ms"
    if details:
        message += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"
    logger.log(
        logging.INFO if success else logging.WARNING,
        message,
        extra={
            "operation": operation,
            "success": success,
            "duration_ms": round(duration_ms, 2),
            **details,
        },
    )
