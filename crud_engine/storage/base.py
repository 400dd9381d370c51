"""
Storage client contract.

The engine talks to storage only through this table-addressed interface,
so any backend that can store flat records keyed by an identifier can
serve runtime-declared models.
"""

import itertools
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any

from ..constants import RECORD_ID_FIELD

ASCENDING = 1
DESCENDING = -1

Record = dict[str, Any]
OrderSpec = list[tuple[str, int]]


class StorageClient(ABC):
    """
    Generic storage operations addressed by table name.

    Records carry their identifier under ``id``. Filters are equality
    matches on record keys (``id`` included). Implementations raise
    ``StorageError`` when the backend fails.
    """

    @abstractmethod
    async def create(self, table: str, data: dict[str, Any]) -> Record:
        """
        Insert a record.

        Returns:
            The stored record, including its assigned ``id``
        """

    @abstractmethod
    async def find_many(
        self,
        table: str,
        filter: dict[str, Any] | None = None,
        order_by: OrderSpec | None = None,
    ) -> list[Record]:
        """
        Find all records matching a filter.

        Args:
            table: Table name
            filter: Equality filter
            order_by: List of (key, direction) tuples
        """

    @abstractmethod
    async def find_one(self, table: str, filter: dict[str, Any]) -> Record | None:
        """Find the first record matching a filter, or None."""

    @abstractmethod
    async def update(
        self, table: str, filter: dict[str, Any], data: dict[str, Any]
    ) -> Record | None:
        """
        Update the record matching a filter.

        Returns:
            The updated record, or None if nothing matched
        """

    @abstractmethod
    async def delete(self, table: str, filter: dict[str, Any]) -> bool:
        """
        Delete the record matching a filter.

        Returns:
            True if a record was deleted
        """

    async def close(self) -> None:
        """Release backend resources. No-op by default."""


def _normalize_id(value: Any) -> Any:
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return value


class InMemoryStorage(StorageClient):
    """
    In-memory storage for tests and local runs.

    Identifiers are monotonically increasing integers per table; string
    identifiers made of digits are normalized to int in filters.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[int, Record]] = defaultdict(dict)
        self._counters: dict[str, itertools.count] = defaultdict(lambda: itertools.count(1))

    async def create(self, table: str, data: dict[str, Any]) -> Record:
        record_id = next(self._counters[table])
        record = {RECORD_ID_FIELD: record_id, **data}
        self._tables[table][record_id] = record
        return dict(record)

    async def find_many(
        self,
        table: str,
        filter: dict[str, Any] | None = None,
        order_by: OrderSpec | None = None,
    ) -> list[Record]:
        results = [dict(r) for r in self._iter_matching(table, filter)]
        for key, direction in reversed(order_by or []):
            results.sort(
                key=lambda r: (r.get(key) is None, r.get(key)),
                reverse=direction == DESCENDING,
            )
        return results

    async def find_one(self, table: str, filter: dict[str, Any]) -> Record | None:
        for record in self._iter_matching(table, filter):
            return dict(record)
        return None

    async def update(
        self, table: str, filter: dict[str, Any], data: dict[str, Any]
    ) -> Record | None:
        for record in self._iter_matching(table, filter):
            record.update({k: v for k, v in data.items() if k != RECORD_ID_FIELD})
            return dict(record)
        return None

    async def delete(self, table: str, filter: dict[str, Any]) -> bool:
        for record in self._iter_matching(table, filter):
            del self._tables[table][record[RECORD_ID_FIELD]]
            return True
        return False

    def _iter_matching(self, table: str, filter: dict[str, Any] | None):
        criteria = dict(filter or {})
        if RECORD_ID_FIELD in criteria:
            criteria[RECORD_ID_FIELD] = _normalize_id(criteria[RECORD_ID_FIELD])
        for record in list(self._tables[table].values()):
            if all(k in record and record[k] == v for k, v in criteria.items()):
                yield record

    def clear(self) -> None:
        """Drop all tables (useful for test setup)."""
        self._tables.clear()
        self._counters.clear()
