"""Stored program lines and the execution cursor walking over them."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from .errors import BasicError, ErrorKind, syntax_error
from .tokenizer import Token, TokenKind

MAX_STACK_DEPTH = 256


@dataclass(frozen=True)
class Location:
    """Position of the cursor; ``line`` is ``None`` for the immediate line."""

    line: int | None
    pos: int = 0


@dataclass(frozen=True)
class ProgramLine:
    source: str
    tokens: list[Token]


@dataclass
class LoopFrame:
    name: str
    limit: float
    step: float
    body: Location


@dataclass
class Program:
    lines: dict[int, ProgramLine] = field(default_factory=dict)
    immediate: ProgramLine = field(default_factory=lambda: ProgramLine("", []))
    location: Location = field(default_factory=lambda: Location(None))
    breakpoint: Location | None = None
    _numbers: list[int] = field(default_factory=list)
    _gosub_stack: list[Location] = field(default_factory=list)
    _loops: list[LoopFrame] = field(default_factory=list)

    # -- editing ---------------------------------------------------------

    def set_line(self, number: int, source: str, tokens: list[Token]) -> None:
        """Store, replace or (given no tokens) delete a numbered line."""
        if tokens:
            if number not in self.lines:
                bisect.insort(self._numbers, number)
            self.lines[number] = ProgramLine(source, tokens)
        elif number in self.lines:
            del self.lines[number]
            self._numbers.remove(number)
        self.breakpoint = None
        self._gosub_stack.clear()
        self._loops.clear()
        self.end()

    def listing(self) -> list[str]:
        return [f"{number} {self.lines[number].source}\n" for number in self._numbers]

    # -- cursor ----------------------------------------------------------

    @property
    def line_number(self) -> int | None:
        return self.location.line

    @property
    def current_line(self) -> ProgramLine:
        if self.location.line is None:
            return self.immediate
        return self.lines[self.location.line]

    def has_next_token(self) -> bool:
        return self.location.pos < len(self.current_line.tokens)

    def peek_token(self) -> Token | None:
        tokens = self.current_line.tokens
        pos = self.location.pos
        return tokens[pos] if pos < len(tokens) else None

    def next_token(self) -> Token | None:
        token = self.peek_token()
        if token is not None:
            self.location = Location(self.location.line, self.location.pos + 1)
        return token

    def expect(self, kind: TokenKind, value: str | None = None) -> Token:
        token = self.next_token()
        if token is None or token.kind is not kind or (value is not None and token.value != value):
            raise syntax_error(f"expected {value or kind.value}")
        return token

    def accept(self, kind: TokenKind, value: str | None = None) -> bool:
        token = self.peek_token()
        if token is None or token.kind is not kind or (value is not None and token.value != value):
            return False
        self.next_token()
        return True

    def discard_remaining_tokens(self) -> None:
        self.location = Location(self.location.line, len(self.current_line.tokens))

    def rewind_to(self, pos: int) -> None:
        self.location = Location(self.location.line, pos)

    def next_line(self) -> bool:
        """Advance to the following numbered line; ``False`` once the program ends."""
        if self.location.line is None:
            return False
        index = bisect.bisect_right(self._numbers, self.location.line)
        if index >= len(self._numbers):
            self.end()
            return False
        self.location = Location(self._numbers[index])
        return True

    # -- control flow ----------------------------------------------------

    def set_immediate(self, source: str, tokens: list[Token]) -> None:
        self.immediate = ProgramLine(source, tokens)
        self.location = Location(None)

    def end(self) -> None:
        self.set_immediate("", [])

    def run_from_start(self) -> None:
        self._gosub_stack.clear()
        self._loops.clear()
        self.breakpoint = None
        if self._numbers:
            self.location = Location(self._numbers[0])
        else:
            self.end()

    def goto(self, number: int) -> None:
        if number not in self.lines:
            raise BasicError(ErrorKind.UNDEFINED_STATEMENT)
        self.location = Location(number)

    def gosub(self, number: int) -> None:
        if len(self._gosub_stack) >= MAX_STACK_DEPTH:
            raise BasicError(ErrorKind.OUT_OF_MEMORY, "stack overflow")
        return_to = self.location
        self.goto(number)
        self._gosub_stack.append(return_to)

    def return_from_gosub(self) -> None:
        if not self._gosub_stack:
            raise BasicError(ErrorKind.RETURN_WITHOUT_GOSUB)
        self.location = self._gosub_stack.pop()

    def start_loop(self, name: str, limit: float, step: float) -> None:
        # A FOR reusing an active loop variable discards that loop and everything nested in it.
        for index, frame in enumerate(self._loops):
            if frame.name == name:
                del self._loops[index:]
                break
        if len(self._loops) >= MAX_STACK_DEPTH:
            raise BasicError(ErrorKind.OUT_OF_MEMORY, "stack overflow")
        self._loops.append(LoopFrame(name, limit, step, self.location))

    def find_loop(self, name: str | None) -> LoopFrame:
        """Return the loop closed by ``NEXT name``, dropping loops nested inside it."""
        for index in range(len(self._loops) - 1, -1, -1):
            frame = self._loops[index]
            if name is None or frame.name == name:
                del self._loops[index + 1 :]
                return frame
        raise BasicError(ErrorKind.NEXT_WITHOUT_FOR)

    def finish_loop(self) -> None:
        self._loops.pop()

    def break_here(self) -> None:
        self.breakpoint = self.location if self.location.line is not None else None
        self.end()

    def continue_from_breakpoint(self) -> None:
        self.end()
        if self.breakpoint is None:
            raise BasicError(ErrorKind.CANNOT_CONTINUE)
        self.location = self.breakpoint
        self.breakpoint = None
