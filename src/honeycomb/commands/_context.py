"""AppContext: the object Click hands every subcommand via ``@click.pass_obj``.

It configures logging and telemetry once per invocation, builds the
PolicyService on demand, and turns ServiceResults into output and exit
codes.
"""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from honeycomb.config.logging import configure_logging
from honeycomb.output.formatters import OutputSettings, format_result
from honeycomb.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from honeycomb.config.settings import HoneycombSettings
    from honeycomb.services.policy import PolicyService
    from honeycomb.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by all commands."""

    def __init__(self, settings: HoneycombSettings) -> None:
        self.settings = settings
        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )
        if settings.verbose:
            enable_telemetry()

    @cached_property
    def service(self) -> PolicyService:
        """Built on first use, so ``--help`` and ``--examples`` skip the catalogue."""
        from honeycomb.services.policy import PolicyService

        return PolicyService(self.settings)

    @cached_property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; exit 1 if it failed.

        Successful output goes to stdout with warnings on stderr (JSON
        already carries them, quiet drops them).  Failures go to stderr.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        click.echo(text)
        if self.output.json_output or self.output.quiet:
            return
        for warning in result.warnings:
            click.secho(f"WARNING: {warning}", err=True, fg="yellow")
