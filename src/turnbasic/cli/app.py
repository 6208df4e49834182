"""CLI main module for TurnBASIC."""

from __future__ import annotations

from typing import Optional

import typer
from loguru import logger

from ..config import get_settings
from ..errors import ConfigurationError
from ..logging_utils import configure_logging
from ..runtime import ManualScheduler, Runtime
from ..runtime.source import resolve_program_path
from .live import run_terminal
from .render import TerminalRenderer

app = typer.Typer(
    name="turnbasic",
    help="Run line-numbered BASIC programs in an interruptible console.",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def main(
    source: Optional[str] = typer.Argument(
        None, help="Program file, or a bare name looked up as <programs-dir>/<name>.bas"
    ),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Keep the prompt after the program ends"),
    warnings: bool = typer.Option(False, "--warnings", "-w", help="Warn about use of undeclared variables"),
    tracing: bool = typer.Option(False, "--tracing", "-t", help="Print each line number as it runs"),
) -> None:
    """Run a BASIC program, or start an interactive session."""
    try:
        overrides: dict[str, object] = {}
        if warnings:
            overrides["warnings"] = True
        if tracing:
            overrides["tracing"] = True
        settings = get_settings(**overrides)
    except ConfigurationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(2) from exc
    configure_logging(profile="cli", level=settings.log_level)

    scheduler = ManualScheduler()
    runtime = Runtime.build(scheduler, settings=settings)
    renderer = TerminalRenderer(runtime.session)
    program = resolve_program_path(source, settings.programs_dir) if source else None
    logger.info("cli.start program={} interactive={}", program, interactive)
    exit_code = run_terminal(runtime, renderer, scheduler, program=program, keep_interactive=interactive)
    if exit_code:
        raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
