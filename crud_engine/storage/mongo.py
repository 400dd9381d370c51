"""
MongoDB storage client.

Each model table maps to a collection of the same name. The storage
``id`` is MongoDB's ``_id``; ObjectIds are rendered as strings on the way
out and parsed back when they appear in filters.
"""

import logging
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from ..constants import RECORD_ID_FIELD
from ..exceptions import StorageError
from .base import OrderSpec, Record, StorageClient

logger = logging.getLogger(__name__)

MONGO_ID_FIELD = "_id"


def _to_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


class MongoStorage(StorageClient):
    """
    StorageClient backed by a motor database.

    Example:
        client = AsyncIOMotorClient(mongo_uri)
        storage = MongoStorage(client[db_name])
    """

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._db = database

    def _collection(self, table: str):
        return self._db[table]

    @staticmethod
    def _to_filter(filter: dict[str, Any] | None) -> dict[str, Any]:
        query = dict(filter or {})
        if RECORD_ID_FIELD in query:
            query[MONGO_ID_FIELD] = _to_object_id(query.pop(RECORD_ID_FIELD))
        return query

    @staticmethod
    def _to_sort(order_by: OrderSpec | None) -> list[tuple[str, int]]:
        return [
            (MONGO_ID_FIELD if key == RECORD_ID_FIELD else key, direction)
            for key, direction in order_by or []
        ]

    @staticmethod
    def _to_record(doc: dict[str, Any] | None) -> Record | None:
        if doc is None:
            return None
        record = dict(doc)
        if MONGO_ID_FIELD in record:
            record_id = record.pop(MONGO_ID_FIELD)
            record = {RECORD_ID_FIELD: str(record_id), **record}
        return record

    async def create(self, table: str, data: dict[str, Any]) -> Record:
        doc = {k: v for k, v in data.items() if k != RECORD_ID_FIELD}
        try:
            result = await self._collection(table).insert_one(doc)
        except PyMongoError as e:
            raise StorageError(str(e), table=table, operation="create") from e
        logger.debug(f"Inserted record {result.inserted_id} into '{table}'")
        return self._to_record({MONGO_ID_FIELD: result.inserted_id, **doc})

    async def find_many(
        self,
        table: str,
        filter: dict[str, Any] | None = None,
        order_by: OrderSpec | None = None,
    ) -> list[Record]:
        try:
            cursor = self._collection(table).find(self._to_filter(filter))
            sort = self._to_sort(order_by)
            if sort:
                cursor = cursor.sort(sort)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageError(str(e), table=table, operation="find_many") from e
        return [self._to_record(doc) for doc in docs]

    async def find_one(self, table: str, filter: dict[str, Any]) -> Record | None:
        try:
            doc = await self._collection(table).find_one(self._to_filter(filter))
        except PyMongoError as e:
            raise StorageError(str(e), table=table, operation="find_one") from e
        return self._to_record(doc)

    async def update(
        self, table: str, filter: dict[str, Any], data: dict[str, Any]
    ) -> Record | None:
        changes = {k: v for k, v in data.items() if k != RECORD_ID_FIELD}
        query = self._to_filter(filter)
        try:
            if not changes:
                doc = await self._collection(table).find_one(query)
            else:
                doc = await self._collection(table).find_one_and_update(
                    query,
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
        except PyMongoError as e:
            raise StorageError(str(e), table=table, operation="update") from e
        return self._to_record(doc)

    async def delete(self, table: str, filter: dict[str, Any]) -> bool:
        try:
            result = await self._collection(table).delete_one(self._to_filter(filter))
        except PyMongoError as e:
            raise StorageError(str(e), table=table, operation="delete") from e
        return result.deleted_count > 0

    async def close(self) -> None:
        self._db.client.close()
