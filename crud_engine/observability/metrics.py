"""
Operation metrics for CRUD_ENGINE.

Counts and latencies per (operation, model) pair, kept in process. The
catalog records ``catalog.register`` and the engine records
``engine.<action>`` for every record operation.
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

MetricKey = tuple[str, str | None]


@dataclass
class OperationMetrics:
    """Aggregate for one operation, optionally narrowed to one model."""

    operation: str
    model: str | None = None
    count: int = 0
    errors: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    last_seen: datetime | None = None

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def observe(self, duration_ms: float, success: bool) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)
        if not success:
            self.errors += 1
        self.last_seen = datetime.now(timezone.utc)

    def merge(self, other: "OperationMetrics") -> None:
        self.count += other.count
        self.errors += other.errors
        self.total_ms += other.total_ms
        self.max_ms = max(self.max_ms, other.max_ms)
        if other.last_seen and (self.last_seen is None or other.last_seen > self.last_seen):
            self.last_seen = other.last_seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "model": self.model,
            "count": self.count,
            "errors": self.errors,
            "avg_ms": round(self.avg_ms, 2),
            "max_ms": round(self.max_ms, 2),
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
        }


class MetricsCollector:
    """
    Thread-safe store of OperationMetrics.

    At most ``max_entries`` (operation, model) pairs are kept; the pair
    updated least recently is dropped first.
    """

    def __init__(self, max_entries: int = 10000) -> None:
        self._entries: OrderedDict[MetricKey, OperationMetrics] = OrderedDict()
        self._lock = threading.Lock()
        self._max_entries = max_entries

    def record(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        model: str | None = None,
    ) -> None:
        key = (operation, model)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                if len(self._entries) >= self._max_entries:
                    self._entries.popitem(last=False)
                entry = self._entries[key] = OperationMetrics(operation, model)
            else:
                self._entries.move_to_end(key)
            entry.observe(duration_ms, success)

    def get(self, operation: str, model: str | None = None) -> OperationMetrics | None:
        """A copy of the entry for ``(operation, model)``, if recorded."""
        with self._lock:
            entry = self._entries.get((operation, model))
            return replace(entry) if entry else None

    def snapshot(self) -> list[dict[str, Any]]:
        """Every (operation, model) entry, least recently updated first."""
        with self._lock:
            return [entry.to_dict() for entry in self._entries.values()]

    def summary(self) -> dict[str, dict[str, Any]]:
        """Entries aggregated across models, keyed by operation."""
        totals: dict[str, OperationMetrics] = {}
        with self._lock:
            for entry in self._entries.values():
                total = totals.setdefault(entry.operation, OperationMetrics(entry.operation))
                total.merge(entry)
        return {operation: total.to_dict() for operation, total in totals.items()}

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()


_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """The process-wide collector."""
    return _collector


def record_operation(
    operation: str, duration_ms: float, success: bool = True, model: str | None = None
) -> None:
    _collector.record(operation, duration_ms, success=success, model=model)
