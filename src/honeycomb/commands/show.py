"""Command: render a binary profile as readable XML."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from honeycomb.commands._base import HcCommand, profile_path_option

if TYPE_CHECKING:
    from honeycomb.commands._context import AppContext


@click.command(
    cls=HcCommand,
    examples="""\
  honeycomb show -p ./0.xml
  honeycomb show -p ./0.xml -o ./0.txt.xml
  honeycomb --json show -p ./0.xml""",
)
@profile_path_option
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save the XML here instead of printing it.",
)
@click.pass_obj
def show(app: AppContext, profile_path: Path | None, output: Path | None) -> None:
    """Convert an ABX profile to textual XML."""
    app.emit(app.service.show(profile_path=profile_path, output=output))
