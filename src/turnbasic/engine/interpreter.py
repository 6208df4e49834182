"""Statement-at-a-time BASIC interpreter core."""

from __future__ import annotations

import random
from collections.abc import Callable
from enum import Enum

from loguru import logger

from ..errors import ProtocolViolationError
from .errors import BasicError, ErrorKind, syntax_error
from .expression import ExpressionEvaluator, Value, as_number, format_number
from .program import Program
from .tokenizer import TokenKind, split_line_number, tokenize
from .types import OutputEvent


class InterpreterState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    AWAITING_INPUT = "awaiting_input"
    NEW_INTERPRETER_REQUESTED = "new_interpreter_requested"


class Interpreter:
    """Runs BASIC one statement per call so callers can interleave other work.

    ``start_evaluating`` and ``continue_evaluating`` raise ``BasicError`` for
    program errors; the interpreter is back in ``IDLE`` when they do.
    """

    def __init__(self, *, warnings: bool = False, tracing: bool = False, rng: random.Random | None = None) -> None:
        self.enable_warnings = warnings
        self.enable_tracing = tracing
        self.rng = rng or random.Random()
        self.last_random = 0.0
        self.program = Program()
        self.variables: dict[str, Value] = {}
        self.state = InterpreterState.IDLE
        self._output: list[OutputEvent] = []
        self._input: str | None = None

    def take_output(self) -> list[OutputEvent]:
        output, self._output = self._output, []
        return output

    def randomize(self, seed: int) -> None:
        self.rng.seed(seed)

    def warn(self, message: str) -> None:
        if self.enable_warnings:
            self._output.append(OutputEvent.warning(message, self.program.line_number))

    # -- entry points ----------------------------------------------------

    def start_evaluating(self, line: str) -> None:
        """Start evaluating one line: a command, a numbered line to store, or an immediate statement.

        Only the first statement of an immediate line runs here; keep calling
        ``continue_evaluating`` while the state is ``RUNNING``.
        """
        self._require(InterpreterState.IDLE, "start_evaluating")
        self._guarded(self._evaluate_line, line)

    def continue_evaluating(self) -> None:
        self._require(InterpreterState.RUNNING, "continue_evaluating")
        self._guarded(self._run_next_statement)

    def provide_input(self, value: str) -> None:
        self._require(InterpreterState.AWAITING_INPUT, "provide_input")
        self._input = value
        self.state = InterpreterState.RUNNING

    def break_at_current_location(self) -> None:
        self.state = InterpreterState.IDLE
        self._input = None
        self._output.append(OutputEvent.brk(self.program.line_number))
        self.program.break_here()

    # -- line handling ---------------------------------------------------

    def _evaluate_line(self, line: str) -> None:
        if self._process_command(line):
            return
        number, rest = split_line_number(line)
        try:
            tokens = tokenize(rest)
        except BasicError as err:
            raise err.locate(None, line.strip())
        if number is not None:
            self.program.set_line(number, rest.strip(), tokens)
            return
        self.program.set_immediate(line.strip(), tokens)
        self._run_next_statement()

    def _process_command(self, line: str) -> bool:
        words = line.split()
        if not words:
            return False
        command = words[0].upper()
        if command == "RUN":
            self.variables.clear()
            self.program.run_from_start()
            self._run_next_statement()
        elif command == "LIST":
            self._output.extend(OutputEvent.print(text) for text in self.program.listing())
        elif command == "NEW":
            self.state = InterpreterState.NEW_INTERPRETER_REQUESTED
        elif command == "CONT":
            self.program.continue_from_breakpoint()
            self._run_next_statement()
        elif command == "TRACE":
            self.enable_tracing = True
        elif command == "NOTRACE":
            self.enable_tracing = False
        else:
            return False
        logger.debug("interpreter.command name={}", command)
        return True

    def _run_next_statement(self) -> None:
        self.state = InterpreterState.RUNNING
        if self.program.has_next_token():
            self._evaluate_statement()
        if self.state is InterpreterState.RUNNING and not self.program.has_next_token():
            if not self.program.next_line():
                self._return_to_idle()

    def _return_to_idle(self) -> None:
        self.program.end()
        self._input = None
        self.state = InterpreterState.IDLE

    def _guarded(self, step: Callable[..., None], *args: str) -> None:
        try:
            step(*args)
        except BasicError as err:
            line = self.program.line_number
            source = self.program.current_line.source or None
            err.locate(line, f"{line} {source}" if line is not None and source else source)
            self._return_to_idle()
            raise

    def _require(self, state: InterpreterState, operation: str) -> None:
        if self.state is not state:
            raise ProtocolViolationError(f"{operation} called while interpreter is {self.state.value}")

    # -- statements ------------------------------------------------------

    def _evaluate_statement(self) -> None:
        statement_start = self.program.location.pos
        token = self.program.next_token()
        assert token is not None
        if token.kind is TokenKind.COLON:
            return
        if self.enable_tracing and self.program.line_number is not None:
            self._output.append(OutputEvent.trace(self.program.line_number))
        if token.kind is TokenKind.REMARK:
            return
        if token.kind is TokenKind.NAME:
            self._assign(str(token.value))
            return
        if token.kind is not TokenKind.KEYWORD:
            raise syntax_error("unexpected token")
        keyword = token.value
        if keyword == "PRINT":
            self._print()
        elif keyword == "INPUT":
            self._input_statement(statement_start)
        elif keyword == "LET":
            self._assign(str(self.program.expect(TokenKind.NAME).value))
        elif keyword == "IF":
            self._if()
        elif keyword == "GOTO":
            self.program.goto(self._line_number_operand())
        elif keyword == "GOSUB":
            self.program.gosub(self._line_number_operand())
        elif keyword == "RETURN":
            self.program.return_from_gosub()
        elif keyword == "END":
            self.program.end()
        elif keyword == "STOP":
            self.break_at_current_location()
        elif keyword == "FOR":
            self._for()
        elif keyword == "NEXT":
            self._next()
        else:
            raise syntax_error("unexpected token")

    def _print(self) -> None:
        parts: list[str] = []
        ends_with_semicolon = False
        while (token := self.program.peek_token()) is not None:
            if token.kind is TokenKind.COLON or token.is_keyword("ELSE"):
                break
            if token.kind is TokenKind.SEMICOLON:
                ends_with_semicolon = True
                self.program.next_token()
            elif token.kind is TokenKind.COMMA:
                ends_with_semicolon = False
                parts.append("\t")
                self.program.next_token()
            else:
                ends_with_semicolon = False
                value = self._evaluate()
                parts.append(value if isinstance(value, str) else format_number(value))
        if not ends_with_semicolon:
            parts.append("\n")
        self._output.append(OutputEvent.print("".join(parts)))

    def _input_statement(self, statement_start: int) -> None:
        prompt = None
        token = self.program.peek_token()
        if token is not None and token.kind is TokenKind.STRING:
            self.program.next_token()
            self.program.expect(TokenKind.SEMICOLON)
            prompt = str(token.value)
        if self._input is None:
            self._await_input(statement_start, prompt)
            return
        raw, self._input = self._input, None
        name = str(self.program.expect(TokenKind.NAME).value)
        first, separator, _ = raw.partition(",")
        if name.endswith("$"):
            value: Value = first.strip()
        else:
            try:
                value = float(first.strip() or 0)
            except ValueError:
                self._output.append(OutputEvent.reenter())
                self._await_input(statement_start, prompt)
                return
        self.variables[name] = value
        if separator:
            self._output.append(OutputEvent.extra_ignored())

    def _await_input(self, statement_start: int, prompt: str | None) -> None:
        if prompt:
            self._output.append(OutputEvent.print(prompt))
        # Resume at the INPUT statement itself once a value arrives.
        self.program.rewind_to(statement_start)
        self.state = InterpreterState.AWAITING_INPUT

    def _assign(self, name: str) -> None:
        self.program.expect(TokenKind.OPERATOR, "=")
        value = self._evaluate()
        if name.endswith("$") != isinstance(value, str):
            raise BasicError(ErrorKind.TYPE_MISMATCH)
        self.variables[name] = value

    def _if(self) -> None:
        condition = as_number(self._evaluate())
        if not self.program.accept(TokenKind.KEYWORD, "THEN"):
            if not self.program.accept(TokenKind.KEYWORD, "GOTO"):
                raise syntax_error("expected THEN")
        if condition:
            self._statement_or_goto()
            if (token := self.program.peek_token()) is not None and token.is_keyword("ELSE"):
                self.program.discard_remaining_tokens()
            return
        # Skip the THEN clause; a colon ends the line, an ELSE runs its clause.
        while (token := self.program.next_token()) is not None:
            if token.kind is TokenKind.COLON:
                self.program.discard_remaining_tokens()
            elif token.is_keyword("ELSE"):
                self._statement_or_goto()
                return

    def _statement_or_goto(self) -> None:
        token = self.program.peek_token()
        if token is not None and token.kind is TokenKind.NUMBER:
            self.program.goto(self._line_number_operand())
        elif token is not None:
            self._evaluate_statement()

    def _for(self) -> None:
        name = str(self.program.expect(TokenKind.NAME).value)
        if name.endswith("$"):
            raise BasicError(ErrorKind.TYPE_MISMATCH)
        self.program.expect(TokenKind.OPERATOR, "=")
        start = as_number(self._evaluate())
        self.program.expect(TokenKind.KEYWORD, "TO")
        limit = as_number(self._evaluate())
        step = as_number(self._evaluate()) if self.program.accept(TokenKind.KEYWORD, "STEP") else 1.0
        self.variables[name] = start
        self.program.start_loop(name, limit, step)

    def _next(self) -> None:
        token = self.program.peek_token()
        name = None
        if token is not None and token.kind is TokenKind.NAME:
            name = str(token.value)
            self.program.next_token()
        frame = self.program.find_loop(name)
        value = as_number(self.variables.get(frame.name, 0.0)) + frame.step
        self.variables[frame.name] = value
        done = value > frame.limit if frame.step >= 0 else value < frame.limit
        if done:
            self.program.finish_loop()
        else:
            self.program.location = frame.body

    def _line_number_operand(self) -> int:
        token = self.program.next_token()
        if token is None or token.kind is not TokenKind.NUMBER:
            raise BasicError(ErrorKind.UNDEFINED_STATEMENT)
        return int(token.value)

    def _evaluate(self) -> Value:
        return ExpressionEvaluator(self).evaluate()

    def read_variable(self, name: str) -> Value:
        if name not in self.variables:
            self.warn(f"Use of undeclared variable '{name}'.")
            return "" if name.endswith("$") else 0.0
        return self.variables[name]

