"""
HTTP routes for the catalog and for every registered model.

The record routes are generic: ``/api/{model_name}`` resolves the model
from the catalog on each request, so a model is reachable as soon as it
is registered and disappears as soon as it is deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from starlette.concurrency import run_in_threadpool

from ..auth import Principal, get_current_principal, require_admin
from ..core import RecordAccessEngine, SchemaCatalog, permissions_for

logger = logging.getLogger(__name__)


async def get_engine(request: Request) -> RecordAccessEngine:
    """Get the RecordAccessEngine instance from app state."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(503, "Engine not initialized")
    return engine


async def get_catalog(engine: RecordAccessEngine = Depends(get_engine)) -> SchemaCatalog:
    return engine.catalog


def create_router() -> APIRouter:
    """
    Build the API router.

    Catalog routes are declared before the generic record routes so that
    ``/api/models`` and ``/api/health`` are never taken for model names.
    """
    router = APIRouter(prefix="/api")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    @router.get("/health")
    async def health(catalog: SchemaCatalog = Depends(get_catalog)) -> dict[str, Any]:
        return {
            "status": "OK",
            "message": "CRUD Engine is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "models": len(catalog),
        }

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @router.post("/models", status_code=status.HTTP_201_CREATED)
    async def register_model(
        definition: dict[str, Any] = Body(...),
        overwrite: bool = True,
        principal: Principal = Depends(require_admin),
        catalog: SchemaCatalog = Depends(get_catalog),
    ) -> dict[str, Any]:
        model = await run_in_threadpool(catalog.register, definition, overwrite=overwrite)
        logger.info(f"Model {model.name} published by {principal.id}")
        return {"message": "Model published successfully", "model": model.to_dict()}

    @router.get("/models")
    async def list_models(
        principal: Principal = Depends(get_current_principal),
        catalog: SchemaCatalog = Depends(get_catalog),
    ) -> list[dict[str, Any]]:
        return [model.to_dict() for model in catalog.list()]

    @router.get("/models/{name}")
    async def get_model(
        name: str,
        principal: Principal = Depends(get_current_principal),
        catalog: SchemaCatalog = Depends(get_catalog),
    ) -> dict[str, Any]:
        return catalog.get(name).to_dict()

    @router.get("/models/{name}/permissions")
    async def get_model_permissions(
        name: str,
        principal: Principal = Depends(get_current_principal),
        catalog: SchemaCatalog = Depends(get_catalog),
    ) -> dict[str, Any]:
        model = catalog.get(name)
        return {
            "model": model.name,
            "role": principal.role,
            "permissions": list(permissions_for(principal.role, model)),
        }

    @router.delete("/models/{name}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_model(
        name: str,
        principal: Principal = Depends(require_admin),
        catalog: SchemaCatalog = Depends(get_catalog),
    ) -> Response:
        await run_in_threadpool(catalog.delete, name)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @router.post("/{model_name}", status_code=status.HTTP_201_CREATED)
    async def create_record(
        model_name: str,
        payload: dict[str, Any] = Body(...),
        principal: Principal = Depends(get_current_principal),
        engine: RecordAccessEngine = Depends(get_engine),
    ) -> dict[str, Any]:
        return await engine.create(model_name, payload, principal)

    @router.get("/{model_name}")
    async def list_records(
        model_name: str,
        request: Request,
        principal: Principal = Depends(get_current_principal),
        engine: RecordAccessEngine = Depends(get_engine),
    ) -> list[dict[str, Any]]:
        filters = dict(request.query_params)
        return await engine.list(model_name, principal, filters)

    @router.get("/{model_name}/{record_id}")
    async def get_record(
        model_name: str,
        record_id: str,
        principal: Principal = Depends(get_current_principal),
        engine: RecordAccessEngine = Depends(get_engine),
    ) -> dict[str, Any]:
        return await engine.get(model_name, record_id, principal)

    @router.put("/{model_name}/{record_id}")
    async def update_record(
        model_name: str,
        record_id: str,
        payload: dict[str, Any] = Body(...),
        principal: Principal = Depends(get_current_principal),
        engine: RecordAccessEngine = Depends(get_engine),
    ) -> dict[str, Any]:
        return await engine.update(model_name, record_id, payload, principal)

    @router.delete("/{model_name}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_record(
        model_name: str,
        record_id: str,
        principal: Principal = Depends(get_current_principal),
        engine: RecordAccessEngine = Depends(get_engine),
    ) -> Response:
        await engine.delete(model_name, record_id, principal)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
