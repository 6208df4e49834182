"""CLI live runner for TurnBASIC."""

from __future__ import annotations

import signal
import threading
import time
from pathlib import Path
from types import FrameType

from loguru import logger

from ..runtime import ManualScheduler, Runtime
from .render import TerminalRenderer


def run_terminal(
    runtime: Runtime,
    renderer: TerminalRenderer,
    scheduler: ManualScheduler,
    *,
    program: Path | None = None,
    keep_interactive: bool = False,
) -> int:
    """Drive a session from the terminal until input is disabled or the user quits.

    Returns the process exit code: 1 when a batch program reported an error.
    """
    session = runtime.session
    if program is not None and keep_interactive:
        session.welcome()
    loaded = program is not None and session.load_program_file(program, keep_interactive=keep_interactive)
    if not loaded:
        session.start()
    interrupted = threading.Event()
    while True:
        _pump_turns(runtime, scheduler, interrupted)
        if not session.console.input_enabled:
            break
        try:
            line = renderer.read_line(session.console.prompt)
        except KeyboardInterrupt:
            if session.request_break():
                continue
            break
        except EOFError:
            break
        session.submit_line(line)
    renderer.flush()
    driver = runtime.driver
    if driver.error_count and not driver.fully_interactive:
        return 1
    return 0


def _pump_turns(runtime: Runtime, scheduler: ManualScheduler, interrupted: threading.Event) -> None:
    """Run scheduled turns; Ctrl-C becomes a break at the next statement boundary."""
    if not scheduler.pending:
        return

    def on_sigint(_signum: int, _frame: FrameType | None) -> None:
        interrupted.set()

    previous = signal.signal(signal.SIGINT, on_sigint)
    try:
        while scheduler.pending:
            if interrupted.is_set():
                interrupted.clear()
                logger.info("cli.interrupt state={}", runtime.driver.state.value)
                runtime.session.request_break()
                continue
            time.sleep(scheduler.next_delay or 0)
            scheduler.run_next()
    finally:
        signal.signal(signal.SIGINT, previous)
