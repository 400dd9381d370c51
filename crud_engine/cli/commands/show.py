"""
Show command for CLI.
"""

from pathlib import Path

import click

from ...constants import DEFAULT_MODELS_DIR
from ...exceptions import NotFoundError
from ..utils import format_definition_output, load_catalog


@click.command()
@click.argument("name")
@click.option(
    "--models-dir",
    "-d",
    type=click.Path(path_type=Path),
    default=DEFAULT_MODELS_DIR,
    envvar="CRUD_MODELS_DIR",
    show_default=True,
    help="Directory holding the model definition files",
)
@click.option(
    "--format",
    "-f",
    "format_type",
    type=click.Choice(["json", "pretty"], case_sensitive=False),
    default="json",
    show_default=True,
    help="Output format",
)
def show(name: str, models_dir: Path, format_type: str) -> None:
    """
    Display a registered model definition.

    NAME: Model name as registered in the catalog

    Examples:
        crud-engine show Task
        crud-engine show Task --format pretty
    """
    catalog = load_catalog(models_dir)
    try:
        model = catalog.get(name)
    except NotFoundError as e:
        raise click.ClickException(e.message) from e
    click.echo(format_definition_output(model, format_type.lower()))
