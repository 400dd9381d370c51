"""
Fixtures for HTTP-level tests.

The app runs against a temporary models directory and InMemoryStorage;
tokens are signed with the test SECRET_KEY.
"""

import os

import pytest
from fastapi.testclient import TestClient

from crud_engine.app import create_app
from crud_engine.auth import Principal, generate_token
from crud_engine.config import EngineConfig
from crud_engine.storage import InMemoryStorage


@pytest.fixture
def engine_config(models_dir) -> EngineConfig:
    return EngineConfig(
        models_dir=str(models_dir),
        storage_backend="memory",
        secret_key=os.environ["SECRET_KEY"],
    )


@pytest.fixture
def api_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def client(engine_config, api_storage):
    """TestClient with the lifespan (catalog load) already run."""
    app = create_app(engine_config, storage=api_storage)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a principal."""

    def _headers(principal: Principal) -> dict:
        token = generate_token(principal, os.environ["SECRET_KEY"])
        return {"Authorization": f"Bearer {token}"}

    return _headers
