"""
Core engine components.

Model definitions, the schema catalog, permission evaluation, field
coercion and the record access engine.
"""

from .catalog import SchemaCatalog
from .coercion import coerce_value, validate_payload
from .definitions import FieldRelation, ModelDefinition, ModelField
from .engine import RecordAccessEngine
from .permissions import AccessDecision, authorize, permissions_for, require
from .schema import (
    MODEL_DEFINITION_SCHEMA,
    ModelDefinitionValidator,
    ensure_valid_definition,
)

__all__ = [
    # Definitions
    "ModelDefinition",
    "ModelField",
    "FieldRelation",
    # Schema
    "MODEL_DEFINITION_SCHEMA",
    "ModelDefinitionValidator",
    "ensure_valid_definition",
    # Catalog
    "SchemaCatalog",
    # Permissions
    "AccessDecision",
    "authorize",
    "require",
    "permissions_for",
    # Coercion
    "coerce_value",
    "validate_payload",
    # Engine
    "RecordAccessEngine",
]
