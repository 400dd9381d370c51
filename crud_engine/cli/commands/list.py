"""
List command for CLI.
"""

from pathlib import Path

import click

from ...constants import DEFAULT_MODELS_DIR
from ..utils import load_catalog


@click.command("list")
@click.option(
    "--models-dir",
    "-d",
    type=click.Path(path_type=Path),
    default=DEFAULT_MODELS_DIR,
    envvar="CRUD_MODELS_DIR",
    show_default=True,
    help="Directory holding the model definition files",
)
def list_models(models_dir: Path) -> None:
    """
    List the models registered in a models directory.

    Examples:
        crud-engine list
        crud-engine list --models-dir /srv/models
    """
    catalog = load_catalog(models_dir)
    models = sorted(catalog.list(), key=lambda m: m.name)
    if not models:
        click.echo(f"No models found in {models_dir}")
        return

    for model in models:
        click.echo(f"{model.name}\t{model.table_name}\t{len(model.fields)} fields")
