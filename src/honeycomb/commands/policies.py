"""Command: list known policies, or those set in a profile."""

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
  honeycomb policies
  honeycomb policies --present -p ./0.xml
  honeycomb -q policies --present""",
)
@click.option("--present", is_flag=True, help="Only policies currently set in the profile.")
@profile_path_option
@click.pass_obj
def policies(app: AppContext, present: bool, profile_path: Path | None) -> None:
    """List policy names in catalogue order."""
    app.emit(app.service.list_policies(present=present, profile_path=profile_path))
