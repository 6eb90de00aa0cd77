from typing import Optional

import typer

from schema_sync.config import ConfigManager, SchemaSyncConfig
from schema_sync.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import schema_sync

        typer.echo(f"schema-sync version: {schema_sync.__version__}")
        raise typer.Exit()


app = typer.Typer(name="schema-sync", no_args_is_help=True)


def get_app_config() -> SchemaSyncConfig:
    """Resolve settings for the current command."""
    return ConfigManager().config


@app.callback()
def app_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR). Overrides the configured level.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """schema-sync - keep the local config schema in step with the documentation."""
    if ctx.invoked_subcommand is not None:
        setup_logging(log_level=(log_level or get_app_config().log_level).upper())
