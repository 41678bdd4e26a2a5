"""FinPlan command-line entry point."""

import typer

from finplan import __version__
from finplan.cli.analysis import health_command, optimize_command
from finplan.cli.report import breakdowns_command, project_command
from finplan.cli.status import status_command
from finplan.core.config import load_config
from finplan.logging_config import setup_logging

app = typer.Typer(
    name="finplan",
    help="Financial plan analytics: breakdowns, projections, optimization and health.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"finplan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Configure logging for all commands."""
    config = load_config(
        log_level="DEBUG" if verbose else None,
        log_json=True if json_logs else None,
    )
    setup_logging(config)


app.command(name="status")(status_command)
app.command(name="breakdowns")(breakdowns_command)
app.command(name="project")(project_command)
app.command(name="optimize")(optimize_command)
app.command(name="health")(health_command)


if __name__ == "__main__":
    app()
