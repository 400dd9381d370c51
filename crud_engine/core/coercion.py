"""
Field coercion and payload validation.

Pure functions that turn client-supplied values into the semantic type a
field declares, and build a storage-safe payload that contains only the
model's declared fields.
"""

import math
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from typing import Any

from ..constants import (
    FIELD_TYPE_BOOLEAN,
    FIELD_TYPE_DATE,
    FIELD_TYPE_NUMBER,
    FIELD_TYPE_STRING,
    FIELD_TYPE_TEXT,
)
from ..exceptions import ValidationError
from .definitions import ModelDefinition, ModelField


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def coerce_number(value: Any) -> int | float:
    """
    Parse a finite number.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid number value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if "_" in text:
            raise ValueError(f"Invalid number value: {value!r}")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            raise ValueError(f"Invalid number value: {value!r}") from None
    else:
        raise ValueError(f"Invalid number value: {value!r}")

    if not math.isfinite(number):
        raise ValueError(f"Invalid number value: {value!r}")
    return number


def coerce_boolean(value: Any) -> bool:
    # Only the literal "1" counts, not " 1".
    if isinstance(value, str):
        return value.lower() == "true" or value == "1"
    return bool(value)


def coerce_date(value: Any) -> datetime:
    """
    Parse a calendar timestamp.

    Accepts datetimes, dates (promoted to midnight), epoch milliseconds and
    ISO-8601 strings (a trailing ``Z`` means UTC).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        raise ValueError(f"Invalid date value: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"Invalid date value: {value!r}")
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Invalid date value: {value!r}") from e
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date value: {value!r}") from None
    raise ValueError(f"Invalid date value: {value!r}")


def coerce_text(value: Any) -> str:
    return str(value)


COERCERS: dict[str, Callable[[Any], Any]] = {
    FIELD_TYPE_NUMBER: coerce_number,
    FIELD_TYPE_BOOLEAN: coerce_boolean,
    FIELD_TYPE_DATE: coerce_date,
    FIELD_TYPE_STRING: coerce_text,
    FIELD_TYPE_TEXT: coerce_text,
}


def coerce_value(field: ModelField, value: Any, model_name: str | None = None) -> Any:
    """
    Coerce a single raw value to the field's declared type.

    Raises:
        ValidationError: If the value cannot be coerced
    """
    coercer = COERCERS.get(field.type)
    if coercer is None:
        raise ValidationError(
            f"Field {field.name} has unsupported type '{field.type}'",
            field_name=field.name,
            model_name=model_name,
        )
    try:
        return coercer(value)
    except ValueError as e:
        raise ValidationError(
            f"Field {field.name}: {e}",
            field_name=field.name,
            model_name=model_name,
            value=value,
        ) from e


def validate_payload(
    model: ModelDefinition, payload: Mapping[str, Any] | None, is_create: bool
) -> dict[str, Any]:
    """
    Validate and coerce a create/update payload against a model.

    Fields are processed in declaration order. Keys the model does not
    declare are dropped. Required fields are only enforced on create
    (where a declared default is substituted); on update a blank required
    field is left out so the stored value is kept.

    Args:
        model: Model to validate against
        payload: Raw client payload
        is_create: True for creation, False for partial update

    Returns:
        Ordered dict of declared, coerced fields

    Raises:
        ValidationError: Missing required field or coercion failure
    """
    payload = payload or {}
    validated: dict[str, Any] = {}

    for field in model.fields:
        value = payload.get(field.name)

        if field.required and _is_blank(value):
            if not is_create:
                continue
            if field.has_default:
                validated[field.name] = coerce_value(field, field.default, model.name)
                continue
            raise ValidationError(
                f"Field {field.name} is required",
                field_name=field.name,
                model_name=model.name,
            )

        if value is not None:
            validated[field.name] = coerce_value(field, value, model.name)

    return validated
