"""Command: report where a policy sits in a profile."""

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
  honeycomb locate no_install_unknown_sources
  honeycomb locate no_factory_reset -p ./0.xml
  honeycomb -q locate no_debugging_features""",
)
@click.argument("policy")
@profile_path_option
@click.pass_obj
def locate(app: AppContext, policy: str, profile_path: Path | None) -> None:
    """Show POLICY's status, byte span and insertion anchor without writing."""
    app.emit(app.service.locate(policy, profile_path=profile_path))
