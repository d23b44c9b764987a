"""
Structural validity check for unitcalc expressions.

Each operator accepts only certain kinds of children: arithmetic needs
numbers on both sides, ``^`` needs a unit on the left and a number on the
right, and so on. The check runs bottom-up and stops at the first failure,
which it records in the line's ErrorString.
"""

from __future__ import annotations

from unitcalc.core.errors import ErrorString
from unitcalc.core.ir.expressions import (
    BINARY_KINDS,
    NUMBER_KINDS,
    UNIT_KINDS,
    BinaryExpr,
    Expr,
    ExprKind,
    Invalid,
    Negate,
    SetVar,
    Var,
)

_LEAF_KINDS = frozenset(
    {
        ExprKind.CONSTANT,
        ExprKind.UNIT,
        ExprKind.VAR,
        ExprKind.EMPTY,
        ExprKind.QUIT,
        ExprKind.HELP,
    }
)

_LEADING_NUMBER_KINDS = frozenset({ExprKind.CONSTANT, ExprKind.NEG, ExprKind.CONST_UNIT})

# Allowed (left, right) child kinds per binary operator. Several entries mean
# any one of the pairs is accepted.
_ALLOWED: dict[ExprKind, tuple[tuple[frozenset[ExprKind], frozenset[ExprKind]], ...]] = {
    ExprKind.CONST_UNIT: ((_LEADING_NUMBER_KINDS, UNIT_KINDS),),
    ExprKind.COMP_UNIT: ((UNIT_KINDS, UNIT_KINDS),),
    ExprKind.DIV_UNIT: ((UNIT_KINDS, UNIT_KINDS),),
    ExprKind.ADD: ((NUMBER_KINDS, NUMBER_KINDS),),
    ExprKind.SUB: ((NUMBER_KINDS, NUMBER_KINDS),),
    ExprKind.MUL: ((NUMBER_KINDS, NUMBER_KINDS),),
    ExprKind.DIV: ((NUMBER_KINDS, NUMBER_KINDS), (UNIT_KINDS, UNIT_KINDS)),
    ExprKind.CONVERT: ((NUMBER_KINDS, UNIT_KINDS),),
    ExprKind.POW: ((UNIT_KINDS, NUMBER_KINDS),),
}


def check_valid(expr: Expr, errors: ErrorString) -> bool:
    """Check that every operator in ``expr`` has children of allowed kinds.

    Args:
        expr: Expression after variable substitution.
        errors: The line's diagnostic; set on the first failure.

    Returns:
        True if the whole tree is well formed. Returns False without adding
        a message if ``errors`` was already set.
    """
    if errors.is_set:
        return False
    return _check(expr, errors)


def _check(expr: Expr, errors: ErrorString) -> bool:
    if isinstance(expr, Invalid):
        reason = expr.reason or "could not parse input"
        errors.report(f"Invalid expression: {reason}")
        return False

    if expr.kind in _LEAF_KINDS:
        return True

    if isinstance(expr, Negate):
        if not _check(expr.operand, errors):
            return False
        if expr.operand.kind in NUMBER_KINDS:
            return True
        if not _report_undefined(expr.operand, errors):
            errors.report(f"Invalid operand for negation: {expr.operand.kind.value}")
        return False

    if isinstance(expr, SetVar):
        if not _check(expr.value, errors):
            return False
        if not isinstance(expr.target, Var):
            errors.report(f"Cannot assign to {expr.target.kind.value}: expected a variable name")
            return False
        value_kind = expr.value.kind
        if value_kind in NUMBER_KINDS or value_kind in UNIT_KINDS:
            return True
        if not _report_undefined(expr.value, errors):
            errors.report(f"Cannot assign {value_kind.value} to '{expr.target.name}'")
        return False

    if expr.kind in BINARY_KINDS:
        assert isinstance(expr, BinaryExpr)
        if not (_check(expr.left, errors) and _check(expr.right, errors)):
            return False
        left_kind = expr.left.kind
        right_kind = expr.right.kind
        for left_ok, right_ok in _ALLOWED[expr.op]:
            if left_kind in left_ok and right_kind in right_ok:
                return True
        if not (_report_undefined(expr.left, errors) or _report_undefined(expr.right, errors)):
            errors.report(
                f"Invalid operands for '{expr.op.value}': {left_kind.value} and {right_kind.value}"
            )
        return False

    raise TypeError(f"Unknown expression type: {type(expr).__name__}")


def _report_undefined(expr: Expr, errors: ErrorString) -> bool:
    """Report a variable that survived substitution, i.e. was never assigned."""
    if isinstance(expr, Var):
        errors.report(f"Variable '{expr.name}' is not defined")
        return True
    return False
