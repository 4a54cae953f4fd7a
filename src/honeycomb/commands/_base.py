"""Click base classes and shared options for honeycomb commands.

``HcCommand`` and ``HcGroup`` accept an ``examples`` string.  Passing
``--examples`` prints it and exits, which keeps ``--help`` short.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click


class _ExamplesMixin:
    """Adds an eager ``--examples`` flag when *examples* is given."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return

        def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if not value or ctx.resilient_parsing:
                return
            click.echo(f"Examples for '{ctx.command_path}':\n")
            click.echo(examples)
            ctx.exit(0)

        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=show_examples,
                help="Show usage examples.",
            )
        )


class HcCommand(_ExamplesMixin, click.Command):
    """Click Command with ``--examples`` support."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class HcGroup(_ExamplesMixin, click.Group):
    """Click Group with ``--examples`` support; subcommands default to HcCommand."""

    command_class = HcCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


def profile_path_option[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Add ``--profile-path`` (defaults to the configured profile)."""
    return click.option(
        "-p",
        "--profile-path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="ABX profile to read (default: [profile] path, /data/system/users/0.xml).",
    )(func)
