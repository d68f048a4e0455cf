"""Main entry point for the bhavscope command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from bhavscope.core.logging import configure_logging

from .daily import register as register_daily_commands
from .formatters import create_formatter
from .snapshots import register as register_snapshot_commands
from .utils import get_config, handle_errors

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def create_app() -> typer.Typer:
    """Create a Typer application instance for bhavscope."""

    app = typer.Typer(add_completion=False, help="End-of-day equity snapshot analytics")

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
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            envvar="BHAVSCOPE_LOG_LEVEL",
            help="Structured log level written to stderr. Defaults to the configured level.",
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

        with handle_errors():
            config = get_config()
        level = (log_level or config.logging.level).strip().upper()
        if level not in _LOG_LEVELS:
            raise typer.BadParameter(f"Unknown log level '{level}'.", param_hint="--log-level")

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "no_color": no_color,
            }
        )
        log_file = config.logging.file
        configure_logging(level, file_output=bool(log_file), file_path=log_file)

    register_daily_commands(app)
    register_snapshot_commands(app)
    return app


app = create_app()


__all__ = ["app", "create_app"]
