"""GlideQuery CLI - check and run GlideQuery scripts."""

import logging

import typer

from glidequery_core.cli.commands import (
    execute_script,
    load_pipeline_settings,
    run_test_mode,
    screen_script,
    validate_script,
)

app = typer.Typer(
    name="glidequery",
    help="Validate, screen and execute GlideQuery scripts",
    no_args_is_help=True,
)


def configure_logging(log_level: str) -> None:
    """Send log records to stderr and set the package logger's level."""
    name = "WARNING" if log_level.lower() == "warn" else log_level.upper()
    level = getattr(logging, name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("glidequery_core").setLevel(level)


@app.callback()
def configure(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (debug, info, warning, error); defaults to LOG_LEVEL",
    ),
) -> None:
    """Configure logging for all commands."""
    configure_logging(log_level or load_pipeline_settings().log_level)


app.command("validate")(validate_script)
app.command("screen")(screen_script)
app.command("execute")(execute_script)
app.command("test")(run_test_mode)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
