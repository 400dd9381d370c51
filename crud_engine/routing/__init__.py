"""
Route registration.

Exposes the catalog and a uniform CRUD surface for every registered model,
and maps engine errors to HTTP status codes.
"""

from .errors import register_exception_handlers, status_code_for
from .routes import create_router, get_catalog, get_engine

__all__ = [
    "create_router",
    "get_engine",
    "get_catalog",
    "register_exception_handlers",
    "status_code_for",
]
