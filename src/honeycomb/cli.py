"""Root CLI group for honeycomb with global flags and command registration."""

from __future__ import annotations

import click

from honeycomb import __version__
from honeycomb.commands import register_commands
from honeycomb.commands._base import HcGroup
from honeycomb.commands._context import AppContext
from honeycomb.config.logging import bind_command
from honeycomb.config.settings import HoneycombSettings


@click.group(
    cls=HcGroup,
    invoke_without_command=True,
    examples="""\
  honeycomb policies
  honeycomb locate no_factory_reset -p ./0.xml
  honeycomb toggle no_factory_reset -p ./0.xml -o ./0.new.xml
  honeycomb -c ./honeycomb.toml toggle lockdown --overwrite""",
)
@click.version_option(version=__version__, prog_name="honeycomb")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and timing telemetry.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """honeycomb: toggle device policies in Android ABX profiles."""
    settings = HoneycombSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    bind_command(ctx.invoked_subcommand)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
