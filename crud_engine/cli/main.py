"""
Entry point for the ``crud-engine`` command.
"""

import click

from .. import __version__
from .commands.list import list_models
from .commands.show import show
from .commands.validate import validate


@click.group()
@click.version_option(__version__, prog_name="crud-engine")
def cli() -> None:
    """Inspect and validate CRUD Engine model definitions."""


cli.add_command(validate)
cli.add_command(list_models)
cli.add_command(show)
