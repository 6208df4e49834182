"""Errors raised while evaluating BASIC code.

These are ordinary program errors: the engine turns them into the text returned
by ``take_latest_error`` and goes back to idle.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    SYNTAX = "SYNTAX ERROR"
    TYPE_MISMATCH = "TYPE MISMATCH"
    UNDEFINED_STATEMENT = "UNDEF'D STATEMENT ERROR"
    RETURN_WITHOUT_GOSUB = "RETURN WITHOUT GOSUB ERROR"
    NEXT_WITHOUT_FOR = "NEXT WITHOUT FOR ERROR"
    DIVISION_BY_ZERO = "DIVISION BY ZERO ERROR"
    ILLEGAL_QUANTITY = "ILLEGAL QUANTITY ERROR"
    CANNOT_CONTINUE = "CAN'T CONTINUE ERROR"
    OUT_OF_MEMORY = "OUT OF MEMORY ERROR"


class BasicError(Exception):
    """A BASIC runtime or syntax error, optionally tied to a program line."""

    def __init__(self, kind: ErrorKind, detail: str | None = None) -> None:
        super().__init__(kind.value)
        self.kind = kind
        self.detail = detail
        self.line_number: int | None = None
        self.source: str | None = None

    def locate(self, line_number: int | None, source: str | None) -> BasicError:
        """Attach the failing line unless a location is already known."""
        if self.line_number is None:
            self.line_number = line_number
        if self.source is None:
            self.source = source
        return self

    def __str__(self) -> str:
        text = self.kind.value
        if self.detail:
            text = f"{text} ({self.detail})"
        if self.line_number is not None:
            text = f"{text} IN {self.line_number}"
        return text

    def render(self) -> str:
        """Message plus a context line showing the offending source, if known."""
        if not self.source:
            return str(self)
        return f"{self}\n| {self.source}"


def syntax_error(detail: str | None = None) -> BasicError:
    return BasicError(ErrorKind.SYNTAX, detail)
