"""CLI commands for GlideQuery scripts.

Provides user-facing commands for checking and running scripts:
- validate: Lint a script locally (no network)
- screen: Run the security screener
- execute: Run a script on the instance
- test: Run a script in test mode (record cap, write warnings)

Scripts are read from a file, or from stdin when the path is "-".
"""

import asyncio
import json

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from glidequery_core.config import GlideQuerySettings, Settings, load_settings
from glidequery_core.scripts import (
    ExecutionOptions,
    ExecutionResult,
    GlideQueryExecutor,
    GlideQueryValidator,
    ScriptSecurityScreener,
)
from glidequery_core.servicenow import ServiceNowScriptClient, create_http_client

console = Console()


def load_pipeline_settings() -> GlideQuerySettings:
    """Load pipeline settings or exit with a configuration error."""
    try:
        return GlideQuerySettings()
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)


def _load_settings() -> Settings:
    """Load settings or exit with a configuration error."""
    try:
        return load_settings()
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)


def validate_script(
    script_file: typer.FileText = typer.Argument(..., help="Script file to read, or '-' for stdin"),
) -> None:
    """Validate script syntax without executing it."""
    settings = load_pipeline_settings()
    validator = GlideQueryValidator(max_script_length=settings.max_script_length)
    result = validator.validate(script_file.read())

    if result.errors:
        table = Table(title="Errors")
        table.add_column("Line", style="cyan", justify="right")
        table.add_column("Message", style="red")
        for error in result.errors:
            table.add_row(str(error.line or "-"), error.message)
        console.print(table)

    for warning in result.warnings or []:
        console.print(f"[yellow]warning:[/yellow] {warning}")

    if not result.valid:
        raise typer.Exit(1)
    console.print("[green]Script is valid[/green]")


def screen_script(
    script_file: typer.FileText = typer.Argument(..., help="Script file to read, or '-' for stdin"),
) -> None:
    """Screen a script for blacklisted patterns and dangerous operations."""
    settings = load_pipeline_settings()
    screener = ScriptSecurityScreener(settings.catalog())
    verdict = screener.screen(script_file.read())

    for violation in verdict.violations or []:
        console.print(f"[red]violation:[/red] {violation}")
    for operation in verdict.dangerous_operations or []:
        console.print(f"[yellow]requires confirmation:[/yellow] {operation}")

    if not verdict.safe:
        raise typer.Exit(1)
    console.print("[green]Script is safe[/green]")


def _run(script: str, options: ExecutionOptions) -> ExecutionResult:
    settings = _load_settings()

    async def _execute() -> ExecutionResult:
        async with create_http_client(settings) as http:
            client = ServiceNowScriptClient(
                http=http,
                endpoint=settings.servicenow.script_endpoint,
                default_timeout=settings.glidequery.timeout,
            )
            executor = GlideQueryExecutor(
                client,
                screener=ScriptSecurityScreener(settings.glidequery.catalog()),
                default_max_results=settings.glidequery.test_max_results,
            )
            return await executor.execute(script, options)

    return asyncio.run(_execute())


def _print_result(result: ExecutionResult) -> None:
    console.print_json(json.dumps(result.model_dump(mode="json", exclude_none=True)))
    if not result.success:
        raise typer.Exit(1)


def execute_script(
    script_file: typer.FileText = typer.Argument(..., help="Script file to read, or '-' for stdin"),
    timeout: int = typer.Option(
        None, "--timeout", "-t", min=1, help="Timeout in milliseconds"
    ),
) -> None:
    """Execute a script on the ServiceNow instance."""
    result = _run(script_file.read(), ExecutionOptions(timeout=timeout))
    _print_result(result)


def run_test_mode(
    script_file: typer.FileText = typer.Argument(..., help="Script file to read, or '-' for stdin"),
    max_results: int = typer.Option(
        None, "--max-results", "-n", min=1, max=1000, help="Record cap (default 100)"
    ),
    timeout: int = typer.Option(
        None, "--timeout", "-t", min=1, help="Timeout in milliseconds"
    ),
) -> None:
    """Execute a script in test mode with a record cap."""
    options = ExecutionOptions(test_mode=True, max_results=max_results, timeout=timeout)
    result = _run(script_file.read(), options)
    _print_result(result)
