"""Cooperative turn-taking driver for an interpreter engine."""

from __future__ import annotations

import time
from typing import assert_never

from loguru import logger

from ..console import ConsoleModel
from ..engine.types import Engine, ExecutionState, OutputEvent, OutputKind
from ..errors import EngineConsistencyError, ProtocolViolationError
from .scheduler import Scheduler, TurnHandle
from .source import split_program

TURN_DELAY_SECONDS = 0.005
IDLE_PROMPT = "] "
INPUT_PROMPT = "? "


class ExecutionDriver:
    """Advance an engine one bounded step per turn, yielding to the host in between.

    The driver never changes state on its own authority: every decision is
    made from what the engine reports right after a call into it.
    """

    def __init__(
        self,
        engine: Engine,
        console: ConsoleModel,
        scheduler: Scheduler,
        *,
        turn_delay: float = TURN_DELAY_SECONDS,
        idle_prompt: str = IDLE_PROMPT,
        input_prompt: str = INPUT_PROMPT,
        seed: int | None = None,
    ) -> None:
        self._engine = engine
        self._console = console
        self._scheduler = scheduler
        self._turn_delay = turn_delay
        self._idle_prompt = idle_prompt
        self._input_prompt = input_prompt
        self._batch_loaded = False
        self._has_broken = False
        self._error_count = 0
        self._pending_turn: TurnHandle | None = None
        self._engine.seed_randomness(seed if seed is not None else int(time.time() * 1000))

    @property
    def state(self) -> ExecutionState:
        return self._engine.get_state()

    @property
    def batch_loaded(self) -> bool:
        return self._batch_loaded

    @property
    def fully_interactive(self) -> bool:
        """Whether reaching program end still yields a usable prompt."""
        return not self._batch_loaded or self._has_broken

    @property
    def error_count(self) -> int:
        return self._error_count

    def can_process_input(self) -> bool:
        return self.state in (ExecutionState.IDLE, ExecutionState.AWAITING_INPUT)

    def can_break(self) -> bool:
        return self.state in (ExecutionState.RUNNING, ExecutionState.AWAITING_INPUT)

    def load_program(self, source_text: str, *, keep_interactive: bool = False) -> int:
        """Feed every numbered line to the engine, then run the program.

        Returns the number of statement lines fed.
        """
        source = split_program(source_text)
        for line in source.skipped:
            logger.warning("program.load skipped unnumbered line={!r}", line)
        for line in source.statements:
            self._engine.start_evaluating(line)
            if self._engine.get_state() is ExecutionState.ERRORED:
                self._show_output()
                self._show_error()
        if not keep_interactive:
            self._batch_loaded = True
        self._engine.start_evaluating("RUN")
        logger.info("program.load lines={} skipped={}", len(source.statements), len(source.skipped))
        self.take_turn()
        return len(source.statements)

    def submit(self, text: str) -> None:
        state = self.state
        if state is ExecutionState.IDLE:
            self._engine.start_evaluating(text)
        elif state is ExecutionState.AWAITING_INPUT:
            self._engine.provide_input(text)
        else:
            raise ProtocolViolationError(f"submit called while state is {state.value}")
        self._console.set_prompt("")
        self.take_turn()

    def break_execution(self, echo: str = "") -> bool:
        """Ask the engine to stop at the next statement boundary.

        Returns ``False`` without doing anything unless a program is running or
        waiting for input. ``echo`` follows the prompt in the line committed
        to the output.
        """
        if not self.can_break():
            return False
        self._has_broken = True
        self._console.commit_prompt_to_output(echo)
        self._console.set_prompt("")
        self._engine.break_at_current_location()
        logger.info("driver.break")
        self.take_turn()
        return True

    def take_turn(self) -> None:
        self._cancel_pending_turn()
        while True:
            self._show_output()
            state = self._engine.get_state()
            logger.debug("driver.turn state={}", state.value)
            if state is ExecutionState.IDLE:
                if self.fully_interactive:
                    self._console.set_prompt(self._idle_prompt)
                else:
                    self._console.disable_input()
                return
            elif state is ExecutionState.AWAITING_INPUT:
                self._console.set_prompt(self._input_prompt)
                return
            elif state is ExecutionState.ERRORED:
                # An error is a transient stop; look at the state again once it is shown.
                self._show_error()
            elif state is ExecutionState.RUNNING:
                self._engine.continue_evaluating()
                self._pending_turn = self._scheduler.call_later(self._turn_delay, self._scheduled_turn)
                return
            else:
                assert_never(state)

    def _scheduled_turn(self) -> None:
        self._pending_turn = None
        self.take_turn()

    def _cancel_pending_turn(self) -> None:
        if self._pending_turn is not None:
            self._pending_turn.cancel()
            self._pending_turn = None

    def _show_output(self) -> None:
        for event in self._engine.take_latest_output():
            self._show_event(event)

    def _show_event(self, event: OutputEvent) -> None:
        kind = event.kind
        if kind is OutputKind.PRINT:
            self._console.print(event.text)
        elif kind is OutputKind.TRACE:
            self._console.print_classified(f"{event.text} ", "info")
        elif (
            kind is OutputKind.BREAK
            or kind is OutputKind.WARNING
            or kind is OutputKind.REENTER
            or kind is OutputKind.EXTRA_IGNORED
        ):
            self._console.print_classified(f"{event.text}\n", "warning")
        else:
            assert_never(kind)

    def _show_error(self) -> None:
        error = self._engine.take_latest_error()
        if not error:
            raise EngineConsistencyError("engine reported an error state without an error message")
        self._error_count += 1
        for index, line in enumerate(error.split("\n")):
            self._console.print_classified(f"{line}\n", "error" if index == 0 else "error-context")
