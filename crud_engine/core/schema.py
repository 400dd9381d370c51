"""
Model definition schema and validation.

Registration payloads are checked in two passes:

1. Structure, against MODEL_DEFINITION_SCHEMA (JSON Schema, via jsonschema).
2. Semantics that JSON Schema cannot express: unique field names, the
   owner field naming a declared field, defaults coercing under their
   field's type, and reserved names.

Both passes report ``(is_valid, error_message, error_paths)`` tuples;
``ensure_valid_definition`` raises ModelDefinitionError instead.
"""

import logging
from collections.abc import Mapping
from typing import Any

from jsonschema import SchemaError, ValidationError, validate

from ..constants import (
    MAX_MODEL_NAME_LENGTH,
    MODEL_NAME_PATTERN,
    RECORD_ID_FIELD,
    RESERVED_MODEL_NAMES,
    SUPPORTED_FIELD_TYPES,
    SUPPORTED_PERMISSIONS,
    SUPPORTED_RELATION_TYPES,
)
from ..exceptions import ModelDefinitionError
from ..exceptions import ValidationError as FieldValidationError
from .coercion import coerce_value
from .definitions import ModelField

logger = logging.getLogger(__name__)

ValidationResult = tuple[bool, str | None, list[str] | None]

MODEL_DEFINITION_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "pattern": MODEL_NAME_PATTERN,
            "maxLength": MAX_MODEL_NAME_LENGTH,
            "description": "Unique model name (letters, digits, underscores)",
        },
        "tableName": {
            "type": "string",
            "minLength": 1,
            "description": "Storage table; derived as lowercase plural of name if absent",
        },
        "fields": {
            "type": "array",
            "items": {"$ref": "#/definitions/field"},
            "description": "Ordered field declarations",
        },
        "ownerField": {
            "type": ["string", "null"],
            "description": "Field holding the creating principal's id",
        },
        "rbac": {
            "type": "object",
            "additionalProperties": {
                "type": "array",
                "minItems": 1,
                "items": {"type": "string", "enum": list(SUPPORTED_PERMISSIONS)},
            },
            "description": "Role name -> permitted actions (or 'all')",
        },
    },
    "required": ["name", "fields", "rbac"],
    "definitions": {
        "field": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "type": {"type": "string", "enum": list(SUPPORTED_FIELD_TYPES)},
                "required": {"type": "boolean"},
                "default": {},
                "unique": {"type": "boolean"},
                "relation": {
                    "type": "object",
                    "properties": {
                        "model": {"type": "string", "minLength": 1},
                        "type": {"type": "string", "enum": list(SUPPORTED_RELATION_TYPES)},
                    },
                    "required": ["model", "type"],
                    "additionalProperties": False,
                },
            },
            "required": ["name", "type"],
        }
    },
}


def _error_path(error: ValidationError) -> str:
    parts = list(error.absolute_path)
    return ".".join(str(p) for p in parts) if parts else "root"


def validate_definition_schema(data: Any) -> ValidationResult:
    """
    Validate a definition's structure against MODEL_DEFINITION_SCHEMA.

    Returns:
        Tuple of (is_valid, error_message, error_paths)
    """
    try:
        validate(instance=data, schema=MODEL_DEFINITION_SCHEMA)
    except ValidationError as e:
        error_paths = [_error_path(e)]
        error_messages = [e.message]
        for suberror in e.context or []:
            error_paths.append(_error_path(suberror))
            error_messages.append(suberror.message)
        return False, "; ".join(dict.fromkeys(error_messages)), error_paths
    except SchemaError as e:
        return False, f"Invalid schema definition: {e.message}", ["schema"]
    return True, None, None


def validate_definition_semantics(data: Mapping[str, Any]) -> ValidationResult:
    """
    Check the rules JSON Schema cannot express.

    Expects a structurally valid definition.
    """
    name = data["name"]
    if name.lower() in RESERVED_MODEL_NAMES:
        return False, f"Model name '{name}' is reserved", ["name"]

    seen: set[str] = set()
    for index, raw_field in enumerate(data["fields"]):
        field_name = raw_field["name"]
        path = f"fields.{index}.name"
        if field_name == RECORD_ID_FIELD:
            return False, f"Field name '{RECORD_ID_FIELD}' is reserved", [path]
        if field_name in seen:
            return False, f"Duplicate field name '{field_name}'", [path]
        seen.add(field_name)

        field = ModelField.from_dict(raw_field)
        if field.has_default:
            try:
                coerce_value(field, field.default, name)
            except FieldValidationError as e:
                return (
                    False,
                    f"Default for field '{field_name}' does not match type "
                    f"'{field.type}': {e.message}",
                    [f"fields.{index}.default"],
                )

    owner_field = data.get("ownerField")
    if owner_field and owner_field not in seen:
        return False, f"ownerField '{owner_field}' is not a declared field", ["ownerField"]

    return True, None, None


class ModelDefinitionValidator:
    """
    Validates raw model definitions before they reach the catalog.
    """

    @staticmethod
    def validate(data: Any) -> ValidationResult:
        """
        Run the structural and semantic checks.

        Returns:
            Tuple of (is_valid, error_message, error_paths)
        """
        is_valid, error, paths = validate_definition_schema(data)
        if not is_valid:
            return is_valid, error, paths
        return validate_definition_semantics(data)


def ensure_valid_definition(data: Any) -> None:
    """
    Validate a raw definition, raising on failure.

    Raises:
        ModelDefinitionError: If the definition is invalid
    """
    is_valid, error, paths = ModelDefinitionValidator.validate(data)
    if not is_valid:
        model_name = data.get("name") if isinstance(data, Mapping) else None
        logger.debug(f"Rejected definition for '{model_name}': {error} (paths: {paths})")
        raise ModelDefinitionError(
            f"Invalid model definition: {error}",
            error_paths=paths,
            model_name=model_name if isinstance(model_name, str) else None,
        )
