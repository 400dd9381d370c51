"""
Authentication glue.

Turns a bearer token into the Principal (id + role) the engine authorizes.
"""

from .dependencies import get_current_principal, require_admin
from .jwt import decode_jwt_token, encode_jwt_token, generate_token, principal_from_token
from .principal import Principal

__all__ = [
    "Principal",
    "get_current_principal",
    "require_admin",
    "decode_jwt_token",
    "encode_jwt_token",
    "generate_token",
    "principal_from_token",
]
