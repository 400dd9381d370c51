"""
Constants for CRUD_ENGINE.

Shared constants used across the codebase: field types, actions, the
permission sentinel and catalog naming rules.
"""

from typing import Final

# ============================================================================
# FIELD TYPE CONSTANTS
# ============================================================================

FIELD_TYPE_STRING: Final[str] = "string"
FIELD_TYPE_NUMBER: Final[str] = "number"
FIELD_TYPE_BOOLEAN: Final[str] = "boolean"
FIELD_TYPE_DATE: Final[str] = "date"
FIELD_TYPE_TEXT: Final[str] = "text"

SUPPORTED_FIELD_TYPES: Final[tuple[str, ...]] = (
    FIELD_TYPE_STRING,
    FIELD_TYPE_NUMBER,
    FIELD_TYPE_BOOLEAN,
    FIELD_TYPE_DATE,
    FIELD_TYPE_TEXT,
)

# Relation cardinalities (informational only)
SUPPORTED_RELATION_TYPES: Final[tuple[str, ...]] = (
    "one-to-one",
    "one-to-many",
    "many-to-one",
)

# ============================================================================
# ACTION / PERMISSION CONSTANTS
# ============================================================================

ACTION_CREATE: Final[str] = "create"
ACTION_READ: Final[str] = "read"
ACTION_UPDATE: Final[str] = "update"
ACTION_DELETE: Final[str] = "delete"

ALL_ACTIONS: Final[tuple[str, ...]] = (
    ACTION_CREATE,
    ACTION_READ,
    ACTION_UPDATE,
    ACTION_DELETE,
)
"""Full action set, in canonical order."""

PERMISSION_ALL: Final[str] = "all"
"""Sentinel granting every action. Stored verbatim, expanded only at evaluation."""

SUPPORTED_PERMISSIONS: Final[tuple[str, ...]] = ALL_ACTIONS + (PERMISSION_ALL,)

DEFAULT_ADMIN_ROLE: Final[str] = "Admin"
"""Role that bypasses ownership scoping (never permission checks)."""

# ============================================================================
# CATALOG CONSTANTS
# ============================================================================

MODEL_NAME_PATTERN: Final[str] = "^[A-Za-z][A-Za-z0-9_]*$"
"""Model names double as catalog file names and URL segments."""

MAX_MODEL_NAME_LENGTH: Final[int] = 64

RESERVED_MODEL_NAMES: Final[tuple[str, ...]] = (
    "models",
    "health",
)
"""Names that would shadow the fixed API routes."""

RECORD_ID_FIELD: Final[str] = "id"
"""Primary identifier key on every stored record."""

DEFINITION_FILE_SUFFIX: Final[str] = ".json"

DEFAULT_MODELS_DIR: Final[str] = "models"

# ============================================================================
# TOKEN CONSTANTS
# ============================================================================

DEFAULT_TOKEN_TTL: Final[int] = 86400  # 24 hours
"""Lifetime of tokens issued by generate_token (seconds)."""

MIN_SECRET_KEY_LENGTH: Final[int] = 32
"""Secret keys shorter than this log a warning."""
