"""Root CLI group for obzctl with global flags and command registration."""

from __future__ import annotations

import click

from obzctl import __version__
from obzctl.commands import register_commands
from obzctl.commands._context import AppContext
from obzctl.config.settings import ObzSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="obzctl")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only ids or a status line.")
@click.option("-v", "--verbose", is_flag=True, help="Show every field and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Use this obzctl.toml instead of searching for one.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """obzctl — Open Board Format toolkit."""
    settings = ObzSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
