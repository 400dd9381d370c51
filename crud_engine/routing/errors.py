"""
Mapping of engine errors to HTTP responses.

Storage and configuration errors are logged in full and returned with a
generic message; every other engine error carries its message and context
to the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..exceptions import (
    ConfigurationError,
    ConflictError,
    CrudEngineError,
    ForbiddenError,
    ModelDefinitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; lookup walks this list in order.
ERROR_STATUS_CODES: list[tuple[type[CrudEngineError], int]] = [
    (ModelDefinitionError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, 422),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_502_BAD_GATEWAY),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(error: CrudEngineError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def crud_engine_error_handler(request: Request, exc: CrudEngineError) -> JSONResponse:
    status_code = status_code_for(exc)

    if isinstance(exc, StorageError):
        logger.error(
            f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc
        )
        return JSONResponse(status_code=status_code, content={"error": "storage failure"})

    if status_code >= 500:
        logger.error(f"Server error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=status_code, content={"error": "server configuration error"})

    content = {"error": exc.message}
    if exc.context:
        content["context"] = jsonable_encoder(exc.context)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CrudEngineError, crud_engine_error_handler)
