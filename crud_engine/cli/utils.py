"""
Utility functions for CLI commands.
"""

import json
from pathlib import Path
from typing import Any

import click

from ..core import ModelDefinition, SchemaCatalog
from ..core.permissions import permissions_for


def load_definition_file(file_path: Path) -> Any:
    """
    Load a model definition JSON file.

    Raises:
        click.ClickException: If the file doesn't exist or is invalid JSON
    """
    if not file_path.exists():
        raise click.ClickException(f"Definition file not found: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in definition file: {e}") from e


def load_catalog(models_dir: Path) -> SchemaCatalog:
    """Open the catalog over ``models_dir``, skipping invalid files."""
    if not models_dir.is_dir():
        raise click.ClickException(f"Models directory not found: {models_dir}")
    catalog = SchemaCatalog(models_dir)
    catalog.load()
    return catalog


def format_definition_output(model: ModelDefinition, format_type: str) -> str:
    """
    Format a definition for output.

    Args:
        model: Definition to render
        format_type: 'json' or 'pretty'
    """
    if format_type == "pretty":
        lines = [
            f"Model: {model.name}",
            f"Table: {model.table_name or model.derive_table_name()}",
            f"Owner field: {model.owner_field or '-'}",
            "Fields:",
        ]
        for field in model.fields:
            flags = []
            if field.required:
                flags.append("required")
            if field.unique:
                flags.append("unique")
            if field.has_default:
                flags.append(f"default={field.default!r}")
            if field.relation:
                flags.append(f"{field.relation.type} {field.relation.model}")
            suffix = f" ({', '.join(flags)})" if flags else ""
            lines.append(f"  - {field.name}: {field.type}{suffix}")
        lines.append("Permissions:")
        for role in model.rbac:
            lines.append(f"  - {role}: {', '.join(permissions_for(role, model))}")
        return "\n".join(lines)

    return json.dumps(model.to_dict(), indent=2, ensure_ascii=False)
