"""
FastAPI application factory.

The catalog is loaded in the lifespan, before the app accepts requests,
and the storage client is closed on shutdown.

Usage:
    uvicorn crud_engine.app:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient

from .auth.dependencies import check_secret_key_strength
from .config import EngineConfig
from .core import RecordAccessEngine, SchemaCatalog
from .exceptions import ConfigurationError
from .observability import clear_correlation_id, set_correlation_id
from .routing import create_router, register_exception_handlers
from .storage import InMemoryStorage, MongoStorage, StorageClient

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def build_storage(config: EngineConfig) -> StorageClient:
    """Create the storage client selected by ``config.storage_backend``."""
    if config.storage_backend == "mongo":
        client = AsyncIOMotorClient(config.mongo_uri)
        return MongoStorage(client[config.db_name])
    return InMemoryStorage()


def create_app(
    config: EngineConfig | None = None,
    catalog: SchemaCatalog | None = None,
    storage: StorageClient | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Engine configuration (defaults to environment-based EngineConfig)
        catalog: Pre-built catalog (defaults to one over ``config.models_dir``)
        storage: Pre-built storage client (defaults to ``build_storage(config)``)

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or EngineConfig()
    try:
        config.validate()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if config.secret_key:
        check_secret_key_strength(config.secret_key)
    else:
        logger.warning("SECRET_KEY is not set; every authenticated request will fail")

    if catalog is None:
        catalog = SchemaCatalog(config.models_dir)
    if storage is None:
        storage = build_storage(config)
    engine = RecordAccessEngine(catalog, storage, admin_role=config.admin_role)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        count = catalog.load()
        logger.info(f"CRUD Engine ready with {count} models ({config.storage_backend} storage)")
        yield
        await storage.close()

    app = FastAPI(title="CRUD Engine", lifespan=lifespan)
    app.state.engine = engine
    app.state.config = config
    app.state.secret_key = config.secret_key

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    register_exception_handlers(app)
    app.include_router(create_router())
    return app
