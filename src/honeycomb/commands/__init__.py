"""Subcommand modules for honeycomb.

Provides register_commands(), which imports command modules only when
the CLI is assembled so ``honeycomb --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from honeycomb.commands.locate import locate
    from honeycomb.commands.policies import policies
    from honeycomb.commands.show import show
    from honeycomb.commands.toggle import toggle

    cli.add_command(toggle)
    cli.add_command(locate)
    cli.add_command(policies)
    cli.add_command(show)
