"""
Validate command for CLI.

Validates a model definition file against the definition schema.
"""

import sys
from pathlib import Path

import click

from ...core import ModelDefinitionValidator
from ..utils import load_definition_file


@click.command()
@click.argument("definition_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed validation errors",
)
def validate(definition_file: Path, verbose: bool) -> None:
    """
    Validate a model definition file.

    DEFINITION_FILE: Path to the <Model>.json file to validate

    Examples:
        crud-engine validate models/Task.json
        crud-engine validate models/Task.json --verbose
    """
    definition = load_definition_file(definition_file)

    is_valid, error_message, error_paths = ModelDefinitionValidator.validate(definition)

    if is_valid:
        click.echo(click.style(f"Definition '{definition_file}' is valid", fg="green"))
        if definition["name"] != definition_file.stem:
            click.echo(
                click.style(
                    f"Warning: name '{definition['name']}' does not match file name "
                    f"'{definition_file.stem}'; the catalog will skip it on load",
                    fg="yellow",
                ),
                err=True,
            )
        sys.exit(0)

    click.echo(click.style(f"Definition '{definition_file}' is invalid", fg="red"))
    if error_message:
        click.echo(click.style(f"Error: {error_message}", fg="red"))
    if error_paths and verbose:
        click.echo("\nError paths:")
        for path in error_paths:
            click.echo(f"  - {path}")
    sys.exit(1)
