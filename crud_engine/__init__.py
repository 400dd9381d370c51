"""
CRUD_ENGINE - Runtime-declared CRUD service

Publish a model definition at runtime and get permission-checked,
ownership-scoped record endpoints for it without a redeploy.
"""

# Application
from .app import create_app
# Authentication
from .auth import Principal, get_current_principal, require_admin
# Configuration
from .config import EngineConfig
# Core engine
from .core import ModelDefinition, RecordAccessEngine, SchemaCatalog, authorize
# Storage layer
from .storage import InMemoryStorage, MongoStorage, StorageClient

__version__ = "0.1.0"

__all__ = [
    # Core
    "RecordAccessEngine",
    "SchemaCatalog",
    "ModelDefinition",
    "authorize",
    # Storage
    "StorageClient",
    "InMemoryStorage",
    "MongoStorage",
    # Auth
    "Principal",
    "get_current_principal",
    "require_admin",
    # App
    "EngineConfig",
    "create_app",
]
