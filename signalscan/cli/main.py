"""Main entry point for the signalscan command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from signalscan import __version__
from signalscan.core.logging import configure_logging

from .formatters import create_formatter
from .scan import register as register_scan_commands


def create_app() -> typer.Typer:
    """Create a Typer application instance for signalscan."""

    app = typer.Typer(add_completion=False, help="signalscan technical indicator scanner")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        log_level: str = typer.Option(
            "INFO",
            "--log-level",
            help="Logging level for stderr output.",
            show_default=True,
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "log_level": log_level.upper(),
                "no_color": no_color,
            }
        )
        _configure_logging(log_level)

    @app.command("version")
    def version() -> None:
        """Print the installed signalscan version."""

        typer.echo(f"signalscan {__version__}")

    register_scan_commands(app)
    return app


def _configure_logging(level_name: str) -> None:
    level = level_name.strip().upper()
    if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
        level = "INFO"
    configure_logging(level)


app = create_app()
