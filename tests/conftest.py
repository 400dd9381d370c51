"""
Pytest configuration and shared fixtures for CRUD_ENGINE tests.

This module provides:
- Model definition factories
- Catalog, storage and engine fixtures
- Principals for each role used across the suite
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test secret key before importing engine components
if "SECRET_KEY" not in os.environ:
    os.environ["SECRET_KEY"] = "test_secret_key_for_testing_only_" + "x" * 32

from crud_engine.auth import Principal
from crud_engine.core import RecordAccessEngine, SchemaCatalog
from crud_engine.observability import get_metrics_collector
from crud_engine.storage import InMemoryStorage

TEST_SECRET_KEY = os.environ["SECRET_KEY"]

# ============================================================================
# DEFINITION FACTORIES
# ============================================================================


@pytest.fixture
def task_definition() -> Dict[str, Any]:
    """Owned model with a required field and a required field with a default."""
    return {
        "name": "Task",
        "fields": [
            {"name": "title", "type": "string", "required": True},
            {"name": "done", "type": "boolean", "required": True, "default": False},
            {"name": "ownerId", "type": "string"},
        ],
        "ownerField": "ownerId",
        "rbac": {"Admin": ["all"], "Viewer": ["read"], "Member": ["all"]},
    }


@pytest.fixture
def note_definition() -> Dict[str, Any]:
    """Unowned model covering every field type."""
    return {
        "name": "Note",
        "tableName": "notebook",
        "fields": [
            {"name": "body", "type": "text", "required": True},
            {"name": "priority", "type": "number", "default": 1},
            {"name": "pinned", "type": "boolean"},
            {"name": "due", "type": "date"},
            {
                "name": "taskId",
                "type": "number",
                "relation": {"model": "Task", "type": "many-to-one"},
            },
        ],
        "rbac": {"Admin": ["all"], "Viewer": ["read"], "Editor": ["create", "read", "update"]},
    }


# ============================================================================
# ENGINE FIXTURES
# ============================================================================


@pytest.fixture
def models_dir(tmp_path):
    """Empty directory for catalog files."""
    path = tmp_path / "models"
    path.mkdir()
    return path


@pytest.fixture
def catalog(models_dir) -> SchemaCatalog:
    """Catalog over an empty temporary directory."""
    catalog = SchemaCatalog(models_dir)
    catalog.load()
    return catalog


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def engine(catalog, storage, task_definition, note_definition) -> RecordAccessEngine:
    """Engine with the Task and Note models registered."""
    catalog.register(task_definition)
    catalog.register(note_definition)
    return RecordAccessEngine(catalog, storage)


@pytest.fixture
def mock_motor_database() -> MagicMock:
    """Motor database whose collections are AsyncMocks (one per name)."""
    collections: Dict[str, MagicMock] = {}

    def get_collection(name: str) -> MagicMock:
        if name not in collections:
            collection = MagicMock()
            collection.name = name
            collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
            collection.find_one = AsyncMock(return_value=None)
            collection.find_one_and_update = AsyncMock(return_value=None)
            collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
            cursor = MagicMock()
            cursor.sort = MagicMock(return_value=cursor)
            cursor.to_list = AsyncMock(return_value=[])
            collection.find = MagicMock(return_value=cursor)
            collections[name] = collection
        return collections[name]

    database = MagicMock()
    database.__getitem__ = MagicMock(side_effect=get_collection)
    database.client = MagicMock()
    return database


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


# ============================================================================
# PRINCIPALS
# ============================================================================


@pytest.fixture
def admin() -> Principal:
    return Principal(id="admin-1", role="Admin")


@pytest.fixture
def other_admin() -> Principal:
    return Principal(id="admin-2", role="Admin")


@pytest.fixture
def viewer() -> Principal:
    return Principal(id="viewer-1", role="Viewer")


@pytest.fixture
def member() -> Principal:
    return Principal(id="member-1", role="Member")


@pytest.fixture
def other_member() -> Principal:
    return Principal(id="member-2", role="Member")
