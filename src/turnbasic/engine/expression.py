"""Recursive-descent evaluation of BASIC expressions."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import TYPE_CHECKING

from .errors import BasicError, ErrorKind, syntax_error
from .tokenizer import TokenKind

if TYPE_CHECKING:
    from .interpreter import Interpreter

Value = float | str

_COMPARISONS: dict[str, Callable[[Value, Value], bool]] = {
    "=": lambda a, b: a == b,
    "<>": lambda a, b: a != b,
    "<": lambda a, b: a < b,  # type: ignore[operator]
    ">": lambda a, b: a > b,  # type: ignore[operator]
    "<=": lambda a, b: a <= b,  # type: ignore[operator]
    ">=": lambda a, b: a >= b,  # type: ignore[operator]
}


def format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def as_number(value: Value) -> float:
    if isinstance(value, str):
        raise BasicError(ErrorKind.TYPE_MISMATCH)
    return value


def as_string(value: Value) -> str:
    if not isinstance(value, str):
        raise BasicError(ErrorKind.TYPE_MISMATCH)
    return value


def _truth(flag: bool) -> float:
    return 1.0 if flag else 0.0


def _rnd(interpreter: Interpreter, args: list[Value]) -> Value:
    selector = as_number(args[0])
    if selector < 0:
        interpreter.rng.seed(selector)
    elif selector == 0:
        return interpreter.last_random
    interpreter.last_random = interpreter.rng.random()
    return interpreter.last_random


def _sqr(value: float) -> float:
    if value < 0:
        raise BasicError(ErrorKind.ILLEGAL_QUANTITY)
    return math.sqrt(value)


def _chr(value: float) -> str:
    if not 0 <= value < 256:
        raise BasicError(ErrorKind.ILLEGAL_QUANTITY)
    return chr(int(value))


def _asc(value: str) -> float:
    if not value:
        raise BasicError(ErrorKind.ILLEGAL_QUANTITY)
    return float(ord(value[0]))


def _val(value: str) -> float:
    try:
        return float(value.strip() or 0)
    except ValueError:
        return 0.0


FUNCTIONS: dict[str, Callable[[Interpreter, list[Value]], Value]] = {
    "ABS": lambda _, args: abs(as_number(args[0])),
    "INT": lambda _, args: float(math.floor(as_number(args[0]))),
    "RND": _rnd,
    "SQR": lambda _, args: _sqr(as_number(args[0])),
    "LEN": lambda _, args: float(len(as_string(args[0]))),
    "STR$": lambda _, args: format_number(as_number(args[0])),
    "VAL": lambda _, args: _val(as_string(args[0])),
    "CHR$": lambda _, args: _chr(as_number(args[0])),
    "ASC": lambda _, args: _asc(as_string(args[0])),
}


class ExpressionEvaluator:
    """Evaluates one expression starting at the program cursor."""

    def __init__(self, interpreter: Interpreter) -> None:
        self._interpreter = interpreter
        self._program = interpreter.program

    def evaluate(self) -> Value:
        return self._or()

    def evaluate_number(self) -> float:
        return as_number(self._or())

    def _or(self) -> Value:
        left = self._and()
        while self._accept_keyword("OR"):
            right = self._and()
            left = _truth(bool(as_number(left)) or bool(as_number(right)))
        return left

    def _and(self) -> Value:
        left = self._not()
        while self._accept_keyword("AND"):
            right = self._not()
            left = _truth(bool(as_number(left)) and bool(as_number(right)))
        return left

    def _not(self) -> Value:
        if self._accept_keyword("NOT"):
            return _truth(not as_number(self._not()))
        return self._comparison()

    def _comparison(self) -> Value:
        left = self._additive()
        while (token := self._program.peek_token()) is not None and token.is_operator(*_COMPARISONS):
            self._program.next_token()
            right = self._additive()
            if isinstance(left, str) != isinstance(right, str):
                raise BasicError(ErrorKind.TYPE_MISMATCH)
            left = _truth(_COMPARISONS[str(token.value)](left, right))
        return left

    def _additive(self) -> Value:
        left = self._multiplicative()
        while (token := self._program.peek_token()) is not None and token.is_operator("+", "-"):
            self._program.next_token()
            right = self._multiplicative()
            if token.value == "+" and isinstance(left, str):
                left = left + as_string(right)
            elif token.value == "+":
                left = as_number(left) + as_number(right)
            else:
                left = as_number(left) - as_number(right)
        return left

    def _multiplicative(self) -> Value:
        left = self._power()
        while (token := self._program.peek_token()) is not None and token.is_operator("*", "/"):
            self._program.next_token()
            right = as_number(self._power())
            if token.value == "*":
                left = as_number(left) * right
            elif right == 0:
                raise BasicError(ErrorKind.DIVISION_BY_ZERO)
            else:
                left = as_number(left) / right
        return left

    def _power(self) -> Value:
        left = self._unary()
        while (token := self._program.peek_token()) is not None and token.is_operator("^"):
            self._program.next_token()
            right = as_number(self._unary())
            try:
                result = as_number(left) ** right
            except (OverflowError, ZeroDivisionError) as exc:
                raise BasicError(ErrorKind.ILLEGAL_QUANTITY) from exc
            # Fractional powers of negative numbers come back complex.
            if isinstance(result, complex):
                raise BasicError(ErrorKind.ILLEGAL_QUANTITY)
            left = float(result)
        return left

    def _unary(self) -> Value:
        token = self._program.peek_token()
        if token is not None and token.is_operator("-", "+"):
            self._program.next_token()
            value = as_number(self._unary())
            return -value if token.value == "-" else value
        return self._primary()

    def _primary(self) -> Value:
        token = self._program.next_token()
        if token is None:
            raise syntax_error("unexpected end of input")
        if token.kind is TokenKind.NUMBER:
            return float(token.value)
        if token.kind is TokenKind.STRING:
            return str(token.value)
        if token.kind is TokenKind.LPAREN:
            value = self._or()
            self._program.expect(TokenKind.RPAREN)
            return value
        if token.kind is TokenKind.NAME:
            name = str(token.value)
            if name in FUNCTIONS:
                return self._call(name)
            return self._interpreter.read_variable(name)
        raise syntax_error("unexpected token")

    def _call(self, name: str) -> Value:
        self._program.expect(TokenKind.LPAREN)
        args = [self._or()]
        while self._program.accept(TokenKind.COMMA):
            args.append(self._or())
        self._program.expect(TokenKind.RPAREN)
        return FUNCTIONS[name](self._interpreter, args)

    def _accept_keyword(self, word: str) -> bool:
        return self._program.accept(TokenKind.KEYWORD, word)
