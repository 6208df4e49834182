"""Types shared by engines and the execution driver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ExecutionState(Enum):
    """Condition an engine reports after each unit of progress."""

    IDLE = "idle"
    RUNNING = "running"
    AWAITING_INPUT = "awaiting_input"
    ERRORED = "errored"


class OutputKind(Enum):
    """Closed set of output event kinds.

    Only ``PRINT`` is program output; the rest are diagnostics. ``TRACE`` events
    are joined with spaces, every other diagnostic occupies its own line.
    """

    PRINT = "print"
    TRACE = "trace"
    BREAK = "break"
    WARNING = "warning"
    REENTER = "reenter"
    EXTRA_IGNORED = "extra_ignored"


@dataclass(frozen=True)
class OutputEvent:
    """One entry drained from an engine's output queue."""

    kind: OutputKind
    text: str

    @classmethod
    def print(cls, text: str) -> OutputEvent:
        return cls(OutputKind.PRINT, text)

    @classmethod
    def trace(cls, line_number: int) -> OutputEvent:
        return cls(OutputKind.TRACE, f"#{line_number}")

    @classmethod
    def brk(cls, line_number: int | None) -> OutputEvent:
        return cls(OutputKind.BREAK, f"BREAK{_in_line(line_number)}")

    @classmethod
    def warning(cls, message: str, line_number: int | None) -> OutputEvent:
        return cls(OutputKind.WARNING, f"WARNING{_in_line(line_number)}: {message}")

    @classmethod
    def reenter(cls) -> OutputEvent:
        return cls(OutputKind.REENTER, "REENTER")

    @classmethod
    def extra_ignored(cls) -> OutputEvent:
        return cls(OutputKind.EXTRA_IGNORED, "EXTRA IGNORED")


def _in_line(line_number: int | None) -> str:
    return f" IN {line_number}" if line_number is not None else ""


class Engine(Protocol):
    """Operations the execution driver needs from an interpreter engine.

    Every call must return after a small, bounded amount of work.
    """

    def get_state(self) -> ExecutionState: ...

    def start_evaluating(self, line: str) -> None: ...

    def continue_evaluating(self) -> None: ...

    def provide_input(self, value: str) -> None: ...

    def break_at_current_location(self) -> None: ...

    def take_latest_output(self) -> list[OutputEvent]: ...

    def take_latest_error(self) -> str | None: ...

    def seed_randomness(self, seed: int) -> None: ...
