"""
FastAPI Authentication Dependencies

Resolves the calling Principal from an ``Authorization: Bearer <jwt>``
header. The verification secret is read from ``app.state.secret_key``,
which ``create_app`` sets from EngineConfig.
"""

import logging

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from ..constants import MIN_SECRET_KEY_LENGTH
from ..exceptions import ConfigurationError
from .jwt import principal_from_token
from .principal import Principal

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_secret_key(request: Request) -> str:
    """
    Secret used to verify bearer tokens.

    Raises:
        ConfigurationError: If no secret is configured
    """
    secret_key = getattr(request.app.state, "secret_key", None)
    if not secret_key:
        raise ConfigurationError(
            "SECRET_KEY is required for JWT token verification. "
            "Set the SECRET_KEY environment variable or pass secret_key to EngineConfig.",
            config_key="SECRET_KEY",
        )
    return secret_key


def check_secret_key_strength(secret_key: str) -> None:
    if len(secret_key) < MIN_SECRET_KEY_LENGTH:
        logger.warning(
            f"SECRET_KEY is only {len(secret_key)} characters. "
            f"Recommendation: Use at least {MIN_SECRET_KEY_LENGTH} characters for production."
        )


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> Principal:
    """
    FastAPI Dependency: verifies the bearer token and returns the Principal.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        principal = principal_from_token(credentials.credentials, get_secret_key(request))
    except jwt.ExpiredSignatureError as e:
        logger.info("get_current_principal: Authentication token has expired.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except (jwt.InvalidTokenError, PydanticValidationError) as e:
        logger.info(f"get_current_principal: Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    request.state.principal = principal
    return principal


async def require_admin(
    request: Request,
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """
    FastAPI Dependency: only lets the configured admin role through.

    Raises:
        HTTPException: 403 for any other role
    """
    admin_role = request.app.state.engine.admin_role
    if not principal.is_role(admin_role):
        logger.info(f"require_admin: principal {principal.id} has role '{principal.role}'")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only {admin_role} can manage models",
        )
    return principal
