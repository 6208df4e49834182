"""Engine protocol implementation backed by the reference interpreter."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from ..errors import ProtocolViolationError
from .errors import BasicError
from .interpreter import Interpreter, InterpreterState
from .types import ExecutionState, OutputEvent

_STATES = {
    InterpreterState.IDLE: ExecutionState.IDLE,
    InterpreterState.RUNNING: ExecutionState.RUNNING,
    InterpreterState.AWAITING_INPUT: ExecutionState.AWAITING_INPUT,
}


class BasicEngine:
    """Wraps an ``Interpreter`` so that program errors become a queryable state."""

    def __init__(self, *, warnings: bool = False, tracing: bool = False) -> None:
        self._interpreter = Interpreter(warnings=warnings, tracing=tracing)
        self._latest_error: str | None = None
        self._pending_output: list[OutputEvent] = []

    @property
    def interpreter(self) -> Interpreter:
        return self._interpreter

    def get_state(self) -> ExecutionState:
        if self._latest_error is not None:
            return ExecutionState.ERRORED
        state = self._interpreter.state
        if state not in _STATES:
            raise ProtocolViolationError(f"interpreter left in transient state {state.value}")
        return _STATES[state]

    def start_evaluating(self, line: str) -> None:
        self._require_no_error("start_evaluating")
        self._step(self._interpreter.start_evaluating, line)

    def continue_evaluating(self) -> None:
        self._require_no_error("continue_evaluating")
        self._step(self._interpreter.continue_evaluating)

    def provide_input(self, value: str) -> None:
        self._interpreter.provide_input(value)

    def break_at_current_location(self) -> None:
        self._interpreter.break_at_current_location()

    def take_latest_output(self) -> list[OutputEvent]:
        output = self._pending_output + self._interpreter.take_output()
        self._pending_output = []
        return output

    def take_latest_error(self) -> str | None:
        error, self._latest_error = self._latest_error, None
        return error

    def seed_randomness(self, seed: int) -> None:
        self._interpreter.randomize(seed)

    def _step(self, operation: Callable[..., None], *args: str) -> None:
        try:
            operation(*args)
        except BasicError as err:
            logger.debug("engine.error kind={} line={}", err.kind.name, err.line_number)
            self._latest_error = err.render()
            return
        if self._interpreter.state is InterpreterState.NEW_INTERPRETER_REQUESTED:
            self._replace_interpreter()

    def _replace_interpreter(self) -> None:
        previous = self._interpreter
        # Output produced before NEW still belongs to this turn.
        self._pending_output.extend(previous.take_output())
        # The random generator carries over so NEW never reseeds it.
        self._interpreter = Interpreter(
            warnings=previous.enable_warnings,
            tracing=previous.enable_tracing,
            rng=previous.rng,
        )
        logger.debug("engine.new_interpreter")

    def _require_no_error(self, operation: str) -> None:
        if self._latest_error is not None:
            raise ProtocolViolationError(f"{operation} called before the latest error was taken")
