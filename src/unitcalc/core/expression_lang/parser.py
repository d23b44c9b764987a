"""
Context-sensitive precedence parser for the unitcalc expression language.

The parser works on a window of the token list. For a window longer than one
token it scores every token and splits at the best one; that token becomes
the root of the subtree (it binds loosest and is evaluated last). Scores
depend on the token's neighbours and on what user variables are currently
bound to, so ``x km`` glues a number to a unit when ``x`` holds a number and
composes two units when ``x`` holds a unit.

Score table (higher splits first):
    10  =                        assignment
     9  ->                       conversion
     8  +  and binary -
     7  *  and / not followed by a unit
     6  - as negation (first token, or after an operator)
     5  number / numeric variable as the first token (``5 km``)
     4  / followed by a unit     (``m / s``)
     3  unit / unit variable after the first token (``kg m``)
     2  ^                        unit degree
     1  - right after ^          (``s ^ -2``)

Ties go to the last token for left-associative rules and to the first token
otherwise. No parenthesised grouping exists in the language.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from unitcalc.core.expression_lang.tokenizer import (
    BINARY_OPERATORS,
    DEFAULT_MAX_LINE_LENGTH,
    Token,
    TokenKind,
    tokenize,
)
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Empty,
    Expr,
    ExprKind,
    Help,
    Invalid,
    Negate,
    Quit,
    SetVar,
    UnitLiteral,
    Var,
)
from unitcalc.core.ir.units import Unit, UnitType

if TYPE_CHECKING:
    from unitcalc.core.expression_lang.variables import VariableStore

logger = logging.getLogger(__name__)


class _Rule(NamedTuple):
    """How a token splits a window: its score, tie-break and resulting node."""

    name: str
    score: int
    left_assoc: bool
    kind: ExprKind | None


_ASSIGN = _Rule("assign", 10, False, ExprKind.SET_VAR)
_CONVERT = _Rule("convert", 9, False, ExprKind.CONVERT)
_ADD = _Rule("add", 8, True, ExprKind.ADD)
_SUB = _Rule("sub", 8, True, ExprKind.SUB)
_MUL = _Rule("mul", 7, True, ExprKind.MUL)
_DIV = _Rule("div", 7, True, ExprKind.DIV)
_NEGATE = _Rule("negate", 6, False, ExprKind.NEG)
_LEADING_NUMBER = _Rule("leading number", 5, False, ExprKind.CONST_UNIT)
_DIV_UNIT = _Rule("div unit", 4, True, ExprKind.DIV_UNIT)
_ADJACENT_UNIT = _Rule("adjacent unit", 3, True, ExprKind.COMP_UNIT)
_POW = _Rule("pow", 2, True, ExprKind.POW)
_DEGREE_NEGATE = _Rule("degree negate", 1, False, ExprKind.NEG)
_NO_SPLIT = _Rule("none", 0, False, None)

_FIXED_RULES: dict[TokenKind, _Rule] = {
    TokenKind.EQUALS: _ASSIGN,
    TokenKind.CONVERT: _CONVERT,
    TokenKind.ADD: _ADD,
    TokenKind.MUL: _MUL,
    TokenKind.CARET: _POW,
}


class _Parser:
    """Recursive window parser over one line's tokens."""

    def __init__(self, tokens: list[Token], store: VariableStore | None) -> None:
        self.tokens = tokens
        self.store = store

    # -- Token classification --

    def is_number(self, tok: Token) -> bool:
        """A number literal, or a variable currently bound to a number."""
        if tok.kind == TokenKind.NUMBER:
            return True
        if tok.kind == TokenKind.VARIABLE and self.store is not None:
            return self.store.holds_number(str(tok.value))
        return False

    def is_unit(self, tok: Token) -> bool:
        """A unit literal, or a variable currently bound to a bare unit."""
        if tok.kind == TokenKind.UNIT:
            return True
        if tok.kind == TokenKind.VARIABLE and self.store is not None:
            return self.store.holds_unit(str(tok.value))
        return False

    def rule_at(self, idx: int, start: int, end: int) -> _Rule:
        """Precedence rule for the token at ``idx`` inside ``[start, end)``."""
        tok = self.tokens[idx]
        first = idx == start
        prev = None if first else self.tokens[idx - 1]
        prev_is_bin_op = prev is not None and prev.kind in BINARY_OPERATORS

        fixed = _FIXED_RULES.get(tok.kind)
        if fixed is not None:
            return fixed
        if tok.kind == TokenKind.SUB:
            if not first and not prev_is_bin_op:
                return _SUB
            if prev is not None and prev.kind == TokenKind.CARET:
                return _DEGREE_NEGATE
            return _NEGATE
        if tok.kind == TokenKind.DIV:
            next_is_unit = idx + 1 < end and self.is_unit(self.tokens[idx + 1])
            return _DIV_UNIT if next_is_unit else _DIV
        if first and self.is_number(tok):
            return _LEADING_NUMBER
        if not first and self.is_unit(tok):
            return _ADJACENT_UNIT
        return _NO_SPLIT

    # -- Parsing --

    def parse(self, start: int, end: int) -> Expr:
        """Parse the token window ``[start, end)``."""
        if end > start and self.tokens[end - 1].kind == TokenKind.END:
            end -= 1

        length = end - start
        if length == 0:
            return Empty()
        if length == 1:
            return self._parse_single(self.tokens[start])

        best_idx = start
        best = self.rule_at(start, start, end)
        for idx in range(start + 1, end):
            rule = self.rule_at(idx, start, end)
            if rule.score > best.score or (rule.score == best.score and rule.left_assoc):
                best_idx, best = idx, rule

        tok = self.tokens[best_idx]
        logger.debug("Split [%d, %d) at %d (%s, %s)", start, end, best_idx, tok.kind, best.name)

        if best.kind is None:
            return self._invalid(start, end, "Cannot make sense of this expression")

        if best.kind == ExprKind.NEG:
            if best_idx != start:
                return self._invalid(start, end, f"Unexpected '-' at position {tok.pos}")
            return Negate(operand=self.parse(start + 1, end))

        if tok.kind in BINARY_OPERATORS and best_idx in (start, end - 1):
            return self._invalid(start, end, f"Operator '{tok.value}' is missing an operand")

        if best.kind == ExprKind.SET_VAR:
            return SetVar(target=self.parse(start, best_idx), value=self.parse(best_idx + 1, end))

        # The pivot token belongs to the literal being composed for these two.
        left_end = best_idx
        right_start = best_idx + 1
        if best.kind == ExprKind.CONST_UNIT:
            left_end = best_idx + 1
        elif best.kind == ExprKind.COMP_UNIT:
            right_start = best_idx

        return BinaryExpr(
            op=best.kind,
            left=self.parse(start, left_end),
            right=self.parse(right_start, end),
        )

    def _parse_single(self, tok: Token) -> Expr:
        if tok.kind == TokenKind.QUIT:
            return Quit()
        if tok.kind == TokenKind.HELP:
            return Help()
        if tok.kind == TokenKind.UNIT:
            assert isinstance(tok.value, UnitType)
            return UnitLiteral(unit=Unit.single(tok.value))
        if tok.kind == TokenKind.NUMBER:
            assert isinstance(tok.value, float)
            return Constant(value=tok.value)
        if tok.kind == TokenKind.VARIABLE:
            return Var(name=str(tok.value))
        if tok.kind == TokenKind.INVALID:
            return Invalid(reason=str(tok.value) if tok.value else None)
        return Invalid(reason=f"Unexpected '{tok.value}' at position {tok.pos}")

    def _invalid(self, start: int, end: int, fallback: str) -> Invalid:
        """Invalid node, preferring the reason of a lexical error in the window."""
        for tok in self.tokens[start:end]:
            if tok.kind == TokenKind.INVALID and tok.value:
                return Invalid(reason=str(tok.value))
        return Invalid(reason=fallback)


def parse(tokens: list[Token], store: VariableStore | None = None) -> Expr:
    """Parse a token list into an AST.

    Args:
        tokens: Output of ``tokenize`` (no WHITESPACE tokens).
        store: Current variable bindings, used to decide whether a variable
            acts as a number or as a unit. Without a store every variable is
            a plain reference.

    Returns:
        The expression tree. Malformed input yields ``Invalid`` nodes rather
        than raising.
    """
    expr = _Parser(tokens, store).parse(0, len(tokens))
    logger.debug("AST: %s", expr)
    return expr


def parse_line(
    source: str,
    store: VariableStore | None = None,
    max_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> Expr:
    """Tokenize and parse one line.

    Example:
        parse_line("10 km - 2 m")  # (10 km) - (2 m)
    """
    return parse(tokenize(source, max_length), store)
