"""Root CLI group for segseq with global flags and command registration."""

from __future__ import annotations

import click
from pydantic import ValidationError

from segseq import __version__
from segseq.commands import register_commands
from segseq.commands._context import AppContext
from segseq.config.settings import SegseqSettings
from segseq.errors import ConfigurationError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="segseq")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and SQL echo on stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """segseq: table-backed segmented identifier generator."""
    try:
        settings = SegseqSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
        )
    except (ConfigurationError, ValidationError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
