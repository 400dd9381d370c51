"""
Storage clients.

Usage:
    from crud_engine.storage import InMemoryStorage, MongoStorage

    storage = InMemoryStorage()
    record = await storage.create("tasks", {"title": "x"})
"""

from .base import ASCENDING, DESCENDING, InMemoryStorage, StorageClient
from .mongo import MongoStorage

__all__ = [
    "StorageClient",
    "InMemoryStorage",
    "MongoStorage",
    "ASCENDING",
    "DESCENDING",
]
