"""
JWT Token Utilities

Verification of the bearer tokens that carry a principal's ``id`` and
``role`` claims. Encoding is provided for tooling and tests; credential
issuance itself lives outside this package.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ..constants import DEFAULT_TOKEN_TTL
from .principal import Principal

JWT_ALGORITHM = "HS256"


def decode_jwt_token(token: str | bytes, secret_key: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token (str or bytes)
        secret_key: Secret key used to sign the token

    Returns:
        Decoded JWT payload as dict

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid
    """
    if isinstance(token, bytes):
        token = token.decode("utf-8")
    return jwt.decode(token, secret_key, algorithms=[JWT_ALGORITHM])


def encode_jwt_token(
    payload: dict[str, Any], secret_key: str, expires_in: int | None = None
) -> str:
    """
    Encode a JWT token with standard claims.

    Args:
        payload: Token payload (will be enhanced with iat/nbf/jti/exp)
        secret_key: Secret key for signing
        expires_in: Optional expiration time in seconds (defaults to DEFAULT_TOKEN_TTL)

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = DEFAULT_TOKEN_TTL
    enhanced_payload = {
        **payload,
        "iat": now,
        "nbf": now,
        "jti": payload.get("jti") or str(uuid.uuid4()),
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(enhanced_payload, secret_key, algorithm=JWT_ALGORITHM)


def generate_token(principal: Principal, secret_key: str, expires_in: int | None = None) -> str:
    """Issue a token carrying the principal's id and role."""
    return encode_jwt_token(
        {"id": principal.id, "role": principal.role}, secret_key, expires_in=expires_in
    )


def principal_from_token(token: str | bytes, secret_key: str) -> Principal:
    """
    Verify a token and build the principal from its claims.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or lacks
            the ``id``/``role`` claims
    """
    payload = decode_jwt_token(token, secret_key)
    if payload.get("id") in (None, "") or not payload.get("role"):
        raise jwt.InvalidTokenError("Token is missing 'id' or 'role' claim")
    return Principal(id=payload["id"], role=payload["role"])
