"""Host-facing console session: one driver, one console, one history."""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from pathlib import Path

from loguru import logger

from .. import __version__
from ..console import ConsoleModel, Direction, InputHistory
from ..errors import ProgramLoadError
from .driver import ExecutionDriver
from .source import read_program

WELCOME_TEMPLATE = "Welcome to TurnBASIC v{version}.\n"

_SESSION: ContextVar[str] = ContextVar("turnbasic_session", default="-")


def current_session() -> str:
    return _SESSION.get()


class ConsoleSession:
    """Map host actions (load, submit, break, navigate) onto the driver and console."""

    def __init__(
        self,
        driver: ExecutionDriver,
        console: ConsoleModel,
        *,
        break_sentinel: str = "\N{COLLISION SYMBOL}",
        show_welcome: bool = True,
        session_id: str | None = None,
    ) -> None:
        self.driver = driver
        self.console = console
        self.history = InputHistory(console.edit_buffer)
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self._break_sentinel = break_sentinel
        self._show_welcome = show_welcome
        self._welcomed = False
        _SESSION.set(self.session_id)

    def start(self) -> None:
        logger.info("session.start fully_interactive={}", self.driver.fully_interactive)
        if self.driver.fully_interactive:
            self.welcome()
        self.driver.take_turn()

    def welcome(self) -> None:
        """Print the banner, at most once per session."""
        if self._show_welcome and not self._welcomed:
            self._welcomed = True
            self.console.print(WELCOME_TEMPLATE.format(version=__version__))

    def load_program(self, source_text: str, *, keep_interactive: bool = False) -> None:
        self.driver.load_program(source_text, keep_interactive=keep_interactive)

    def load_program_file(self, path: Path, *, keep_interactive: bool = False) -> bool:
        """Load and run a program file; returns ``False`` if it could not be read.

        A read failure is shown as an error line and leaves the session
        interactive.
        """
        try:
            source_text = read_program(path)
        except ProgramLoadError as exc:
            logger.warning("session.load_failed path={} error={}", path, exc)
            self.console.print_classified(f"{exc}\n", "error")
            return False
        self.load_program(source_text, keep_interactive=keep_interactive)
        return True

    def submit_line(self, value: str | None = None) -> None:
        if value is None:
            value = self.console.edit_buffer.text
        self.history.record_submission(value)
        # At an INPUT prompt the sentinel is an ordinary value.
        if not self.driver.can_process_input() and value == self._break_sentinel:
            self.console.edit_buffer.clear()
            self.request_break(echo=value)
            return
        if not self.driver.can_process_input():
            logger.info("session.submit ignored state={}", self.driver.state.value)
            return
        self.console.commit_prompt_to_output(value)
        self.driver.submit(value)
        self.console.edit_buffer.clear()

    def request_break(self, echo: str = "") -> bool:
        return self.driver.break_execution(echo)

    def navigate(self, direction: Direction) -> bool:
        return self.history.record_keystroke(direction)
