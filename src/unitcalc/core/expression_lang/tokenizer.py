"""
Tokenizer for the unitcalc expression language.

Converts one input line into a flat sequence of typed tokens. Lexical errors
do not raise: they produce an INVALID token carrying the reason, which ends
the sequence.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterator
from enum import StrEnum, auto

from unitcalc.core.ir.units import UNIT_SYMBOLS, UnitType

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_LENGTH = 256


class TokenKind(StrEnum):
    """Token types for the expression language."""

    # Literals
    NUMBER = auto()
    UNIT = auto()
    VARIABLE = auto()

    # Operators
    EQUALS = auto()
    CONVERT = auto()  # ->
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    CARET = auto()

    # Commands
    HELP = auto()
    QUIT = auto()

    WHITESPACE = auto()
    END = auto()
    INVALID = auto()


BINARY_OPERATORS = frozenset(
    {
        TokenKind.EQUALS,
        TokenKind.CONVERT,
        TokenKind.ADD,
        TokenKind.SUB,
        TokenKind.MUL,
        TokenKind.DIV,
        TokenKind.CARET,
    }
)


class Token:
    """A single token from the expression tokenizer.

    ``value`` holds the payload: a float for NUMBER, a UnitType for UNIT, the
    name for VARIABLE and the reason for INVALID.
    """

    __slots__ = ("kind", "value", "pos")

    def __init__(
        self,
        kind: TokenKind,
        value: float | UnitType | str | None = None,
        pos: int = 0,
    ) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.kind, self.value))


_COMMANDS: dict[str, TokenKind] = {
    "quit": TokenKind.QUIT,
    "exit": TokenKind.QUIT,
    "help": TokenKind.HELP,
}

_OPERATORS: dict[str, TokenKind] = {
    "+": TokenKind.ADD,
    "-": TokenKind.SUB,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "^": TokenKind.CARET,
    "=": TokenKind.EQUALS,
}

_WHITESPACE = " \t\n\r"

# Integer part with an optional fraction: 12, 12.5, 12.
_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?")
# Exponent digits after e/E; a sign is not accepted
_EXPONENT_RE = re.compile(r"[0-9]+")
# Word: letter followed by letters, digits and underscores
_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def _is_letter(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def scan(source: str, max_length: int = DEFAULT_MAX_LINE_LENGTH) -> Iterator[Token]:
    """Yield every token of ``source``, including WHITESPACE.

    The last token is always END or INVALID.
    """
    n = len(source)
    if n > max_length:
        yield Token(
            TokenKind.INVALID,
            f"Input exceeds maximum length of {max_length} characters",
            0,
        )
        return

    i = 0
    while True:
        if i >= n:
            yield Token(TokenKind.END, None, n)
            return

        c = source[i]

        # Embedded terminator before the end of the line
        if c == "\0":
            yield Token(TokenKind.INVALID, f"Unexpected end of input at position {i}", i)
            return

        if _is_letter(c):
            m = _WORD_RE.match(source, i)
            assert m is not None
            word = m.group(0)
            if word in _COMMANDS:
                yield Token(_COMMANDS[word], word, i)
            elif word in UNIT_SYMBOLS:
                yield Token(TokenKind.UNIT, UNIT_SYMBOLS[word], i)
            else:
                yield Token(TokenKind.VARIABLE, word, i)
            i = m.end()
            continue

        if c in _WHITESPACE:
            start = i
            while i < n and source[i] in _WHITESPACE:
                i += 1
            yield Token(TokenKind.WHITESPACE, None, start)
            continue

        if c in _OPERATORS:
            if c == "-" and source.startswith("->", i):
                yield Token(TokenKind.CONVERT, "->", i)
                i += 2
            else:
                yield Token(_OPERATORS[c], c, i)
                i += 1
            continue

        if _is_digit(c):
            token, i = _read_number(source, i)
            yield token
            if token.kind == TokenKind.INVALID:
                return
            continue

        yield Token(TokenKind.INVALID, f"Unexpected character {c!r} at position {i}", i)
        return


def _read_number(source: str, start: int) -> tuple[Token, int]:
    """Read ``digits[.digits][e digits]`` starting at ``start``."""
    m = _NUMBER_RE.match(source, start)
    assert m is not None
    text = m.group(0)
    end = m.end()

    if end < len(source) and source[end] in "eE":
        exp = _EXPONENT_RE.match(source, end + 1)
        if exp is None:
            if source.startswith("-", end + 1):
                reason = "Negative exponents are not supported in scientific notation"
            else:
                reason = f"Malformed number at position {start}"
            return Token(TokenKind.INVALID, reason, start), end
        text = f"{text}e{exp.group(0)}"
        end = exp.end()

    value = float(text)
    if math.isinf(value):
        return Token(TokenKind.INVALID, f"Number too large at position {start}", start), end
    return Token(TokenKind.NUMBER, value, start), end


def tokenize(source: str, max_length: int = DEFAULT_MAX_LINE_LENGTH) -> list[Token]:
    """Tokenize one line, dropping WHITESPACE tokens.

    Args:
        source: The input line (trailing newline already stripped).
        max_length: Longer lines become a single INVALID token.

    Returns:
        Tokens ending in END, or in INVALID if the line could not be scanned.
    """
    tokens = [t for t in scan(source, max_length) if t.kind != TokenKind.WHITESPACE]
    logger.debug("Tokens: %s", tokens)
    return tokens
