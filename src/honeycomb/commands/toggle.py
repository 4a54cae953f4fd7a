"""Command: flip a policy in a profile (remove when set, insert when absent)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from honeycomb.commands._base import HcCommand, profile_path_option
from honeycomb.services.policy import ToggleMode

if TYPE_CHECKING:
    from honeycomb.commands._context import AppContext


@click.command(
    cls=HcCommand,
    examples="""\
  honeycomb toggle no_install_unknown_sources -o /sdcard/0.xml
  honeycomb toggle no_factory_reset --overwrite
  honeycomb toggle no_factory_reset --overwrite --no-backup --mode set
  honeycomb toggle no_usb_file_transfer -p ./0.xml -o ./0.new.xml --show-xml
  honeycomb --json toggle no_config_wifi -p ./0.xml -o ./out.xml""",
)
@click.argument("policy")
@profile_path_option
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the edited profile here.",
)
@click.option("--overwrite", is_flag=True, help="Replace the input profile in place.")
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Keep a timestamped .bak copy when overwriting (default: [profile] backup).",
)
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ToggleMode], case_sensitive=False),
    default=ToggleMode.TOGGLE.value,
    show_default=True,
    help="toggle flips; set only inserts; clear only removes.",
)
@click.option("--show-xml", is_flag=True, help="Print the edited profile as XML.")
@click.pass_obj
def toggle(
    app: AppContext,
    policy: str,
    profile_path: Path | None,
    output: Path | None,
    overwrite: bool,
    backup: bool | None,
    mode: str,
    show_xml: bool,
) -> None:
    """Toggle POLICY: remove it when set, insert it when absent."""
    if output is not None and overwrite:
        raise click.UsageError("--output and --overwrite are mutually exclusive")

    result = app.service.toggle(
        policy,
        profile_path=profile_path,
        output=output,
        overwrite=overwrite,
        backup=backup,
        mode=ToggleMode(mode.lower()),
        show_xml=show_xml,
    )
    app.emit(result)
