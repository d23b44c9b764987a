"""
Expression evaluator for unitcalc.

Folds a checked expression tree into a number. Pure evaluation, no I/O.
Operands of ``+``, ``-`` and ``/`` are converted into the left operand's
unit before combining; ``->`` converts its left side into the target unit.
Nodes that only describe a unit evaluate to 0.

Division by zero is reported through the ErrorString instead of producing
inf or nan.
"""

from __future__ import annotations

from unitcalc.core.errors import ErrorString, ExpressionEvalError
from unitcalc.core.expression_lang.unit_algebra import conversion_factor
from unitcalc.core.expression_lang.unit_checker import infer_unit
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Expr,
    ExprKind,
    Negate,
    UnitLiteral,
    is_unit,
)
from unitcalc.core.ir.units import Unit

_UNIT_ONLY_KINDS = frozenset({ExprKind.POW, ExprKind.COMP_UNIT, ExprKind.DIV_UNIT})


def evaluate(expr: Expr, errors: ErrorString) -> float:
    """Evaluate an expression that passed the validity and unit checks.

    Args:
        expr: Substituted, checked expression.
        errors: The line's diagnostic; set on division by zero.

    Returns:
        The numeric value. Meaningless once ``errors`` is set.

    Raises:
        ExpressionEvalError: If the tree contains a node with no numeric
            meaning (assignment, unbound variable, empty/quit/help/invalid).
    """
    return _Evaluator(errors).interpret(expr)


class _Evaluator:
    def __init__(self, errors: ErrorString) -> None:
        self.errors = errors
        self._units: dict[int, Unit] = {}

    def unit_of(self, expr: Expr) -> Unit:
        key = id(expr)
        if key not in self._units:
            self._units[key] = infer_unit(expr, self.errors, self.interpret)
        return self._units[key]

    def interpret(self, expr: Expr) -> float:
        """Dispatch evaluation to the appropriate handler."""
        if isinstance(expr, Constant):
            return expr.value

        if isinstance(expr, UnitLiteral):
            return 0.0

        if isinstance(expr, Negate):
            return -self.interpret(expr.operand)

        if isinstance(expr, BinaryExpr):
            return self.interpret_binary(expr)

        raise ExpressionEvalError(f"Cannot evaluate {expr.kind.value} expression: {expr}")

    def interpret_binary(self, expr: BinaryExpr) -> float:
        """Evaluate a binary expression."""
        if expr.op in _UNIT_ONLY_KINDS:
            return 0.0

        if expr.op == ExprKind.CONST_UNIT:
            return self.interpret(expr.left)

        if expr.op == ExprKind.CONVERT:
            left = self.interpret(expr.left)
            return left * conversion_factor(self.unit_of(expr.left), self.unit_of(expr.right))

        if expr.op == ExprKind.DIV and is_unit(expr):
            return 0.0

        left = self.interpret(expr.left)
        right = self.interpret(expr.right)

        if expr.op == ExprKind.MUL:
            return left * right

        # Express the right operand in the left operand's unit
        right *= conversion_factor(self.unit_of(expr.right), self.unit_of(expr.left))

        if expr.op == ExprKind.ADD:
            return left + right
        if expr.op == ExprKind.SUB:
            return left - right
        if expr.op == ExprKind.DIV:
            if right == 0:
                self.errors.report("Division by zero")
                return 0.0
            return left / right

        raise ExpressionEvalError(f"Unknown binary op: {expr.op}")
