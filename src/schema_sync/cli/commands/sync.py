"""Schema sync CLI commands.

`schema-sync check`, `schema-sync status` and `schema-sync extract`.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from schema_sync.cli.app import app, get_app_config
from schema_sync.cli.commands.command_utils import run_with_cleanup
from schema_sync.formatting import format_markdown_report, format_report
from schema_sync.repository.retrieval_errors import RetrievalError
from schema_sync.services.schema_sync_service import SchemaSyncService

console = Console()


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# --- Check ---


@app.command()
def check(
    local_schema: Annotated[
        Optional[Path],
        typer.Option("--local-schema", help="Local schema JSON file (defaults to config)."),
    ] = None,
    save_report: Annotated[
        Optional[Path],
        typer.Option("--save-report", help="Write the diff report as JSON to this path."),
    ] = None,
    markdown: Annotated[
        Optional[Path],
        typer.Option("--markdown", help="Write a Markdown change report to this path."),
    ] = None,
    fail_on_breaking: Annotated[
        bool,
        typer.Option("--fail-on-breaking", help="Exit with code 2 when breaking changes are found."),
    ] = False,
):
    """Check the documentation for schema changes without applying them.

    Exits 0 when the comparison completes, 1 when it cannot run, and 2 with
    --fail-on-breaking if any change is breaking.
    """
    try:
        service = SchemaSyncService(get_app_config())
        result = run_with_cleanup(service.check(local_schema))
    except (ValueError, RetrievalError) as e:
        console.print(f"[red]Check failed: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        logger.error(f"Error during check: {e}")
        typer.echo(f"Error during check: {e}", err=True)
        raise typer.Exit(1)

    report = result.report
    console.print(format_report(report), markup=False, highlight=False)
    console.print(f"Sources: {len(result.remote.sources)} chunks")

    if save_report:
        _write_json(save_report, report.to_dict())
        console.print(f"Detailed report saved to: {save_report}")

    if markdown:
        markdown.parent.mkdir(parents=True, exist_ok=True)
        markdown.write_text(format_markdown_report(report), encoding="utf-8")
        console.print(f"Markdown report saved to: {markdown}")

    if fail_on_breaking and report.breaking:
        console.print("[red]Breaking changes detected[/red]")
        raise typer.Exit(2)


# --- Extract ---


@app.command()
def extract(
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Where to write the extracted schema."),
    ] = Path("extracted-schema.json"),
):
    """Extract the schema from the documentation and save it as JSON."""
    try:
        service = SchemaSyncService(get_app_config())
        schema = run_with_cleanup(service.extract())
    except (ValueError, RetrievalError) as e:
        console.print(f"[red]Extraction failed: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        logger.error(f"Error during extract: {e}")
        typer.echo(f"Error during extract: {e}", err=True)
        raise typer.Exit(1)

    _write_json(output, schema.to_dict())
    console.print(f"[green]Schema extracted to {output}[/green]")
    console.print(f"   Version: {schema.version}")
    console.print(f"   Nodes:   {len(schema.nodes)}")
    console.print(f"   Enums:   {len(schema.enums)}")


# --- Status ---


@app.command()
def status(
    local_schema: Annotated[
        Optional[Path],
        typer.Option("--local-schema", help="Local schema JSON file (defaults to config)."),
    ] = None,
):
    """Show the local schema and the state of the documentation source."""
    try:
        service = SchemaSyncService(get_app_config())
        result = run_with_cleanup(service.status(local_schema))
    except Exception as e:
        logger.error(f"Error during status: {e}")
        typer.echo(f"Error during status: {e}", err=True)
        raise typer.Exit(1)

    table = Table(title="Schema Sync Status")
    table.add_column("Item", style="cyan")
    table.add_column("Value")

    table.add_row("Local schema", str(result.local_path))
    table.add_row("Last sync", result.last_sync or "Never")
    if result.local_error:
        table.add_row("Local status", f"[red]{result.local_error}[/red]")
    else:
        table.add_row("Local version", result.local_version or "unknown")
        table.add_row("Local nodes", str(result.local_nodes))

    if result.retrieval is not None:
        table.add_row("Docs source", f"[green]connected[/green] ({result.retrieval.mode})")
        for name, value in result.retrieval.counters.items():
            table.add_row(name.replace("_", " ").capitalize(), str(value))
    else:
        table.add_row("Docs source", f"[red]unavailable[/red]: {result.retrieval_error}")

    console.print(table)
