"""Tokenizer for a single line of BASIC source."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import syntax_error


class TokenKind(Enum):
    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    COLON = ":"
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    REMARK = "remark"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str | float = ""

    def is_keyword(self, *words: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.value in words

    def is_operator(self, *symbols: str) -> bool:
        return self.kind is TokenKind.OPERATOR and self.value in symbols


KEYWORDS = frozenset(
    {
        "PRINT",
        "INPUT",
        "LET",
        "IF",
        "THEN",
        "ELSE",
        "GOTO",
        "GOSUB",
        "RETURN",
        "END",
        "STOP",
        "FOR",
        "TO",
        "STEP",
        "NEXT",
        "REM",
        "AND",
        "OR",
        "NOT",
    }
)

_PUNCTUATION = {
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>(?:\d+\.?\d*|\.\d+)(?:E[+-]?\d+)?)
    |(?P<string>"[^"]*"?)
    |(?P<word>[A-Z][A-Z0-9]*\$?)
    |(?P<operator><>|<=|>=|[-+*/^=<>])
    |(?P<punct>[:;,()?])
    """,
    re.VERBOSE | re.IGNORECASE,
)


def tokenize(line: str) -> list[Token]:
    """Split one line of BASIC (without its line number) into tokens."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(line):
        match = _TOKEN_RE.match(line, pos)
        if match is None:
            raise syntax_error(f"illegal character {line[pos]!r}")
        pos = match.end()
        group = match.lastgroup
        text = match.group()
        if group == "space":
            continue
        if group == "number":
            tokens.append(Token(TokenKind.NUMBER, float(text)))
        elif group == "string":
            if len(text) < 2 or not text.endswith('"'):
                raise syntax_error("unterminated string")
            tokens.append(Token(TokenKind.STRING, text[1:-1]))
        elif group == "word":
            word = text.upper()
            if word == "REM":
                tokens.append(Token(TokenKind.REMARK, line[pos:].strip()))
                break
            kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.NAME
            tokens.append(Token(kind, word))
        elif group == "operator":
            tokens.append(Token(TokenKind.OPERATOR, text))
        elif text == "?":
            tokens.append(Token(TokenKind.KEYWORD, "PRINT"))
        else:
            tokens.append(Token(_PUNCTUATION[text]))
    return tokens


def split_line_number(line: str) -> tuple[int | None, str]:
    """Separate a leading line number from the rest of the line."""
    match = re.match(r"\s*(\d+)", line)
    if match is None:
        return None, line
    return int(match.group(1)), line[match.end() :]
