"""
Dimensional analysis for unitcalc expressions.

Infers the unit of every node bottom-up and rejects operations whose units
are incompatible (adding km to s, converting kg to h). The inferred units
also drive the conversion factors the evaluator applies.

A rejected node yields the Unknown unit. Unknown poisons every node above
it without producing a second message.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from unitcalc.core.errors import ErrorString
from unitcalc.core.expression_lang.unit_algebra import (
    check_convertible,
    combine,
    display_unit,
    invert,
    raise_degree,
)
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Expr,
    ExprKind,
    Negate,
    SetVar,
    UnitLiteral,
    Var,
)
from unitcalc.core.ir.units import Unit

logger = logging.getLogger(__name__)

# Evaluates a dimensionless sub-expression; used for the degree in ``u ^ n``.
ConstantEvaluator = Callable[[Expr], float]


def infer_unit(expr: Expr, errors: ErrorString, evaluate_constant: ConstantEvaluator) -> Unit:
    """Infer the unit of ``expr``.

    Args:
        expr: Expression that passed the validity check.
        errors: The line's diagnostic; set on the first unit error.
        evaluate_constant: Capability to evaluate the right-hand side of
            ``^``, whose value becomes part of the unit.

    Returns:
        The inferred unit, or ``Unit.unknown()`` if a unit error occurred.
    """
    return _UnitChecker(errors, evaluate_constant).infer(expr)


class _UnitChecker:
    def __init__(self, errors: ErrorString, evaluate_constant: ConstantEvaluator) -> None:
        self.errors = errors
        self.evaluate_constant = evaluate_constant

    def fail(self, message: str) -> Unit:
        self.errors.report(message)
        return Unit.unknown()

    def infer(self, expr: Expr) -> Unit:
        """Dispatch unit inference."""
        if isinstance(expr, Constant):
            return Unit.none()

        if isinstance(expr, UnitLiteral):
            return expr.unit

        if isinstance(expr, Var):
            # Substitution replaces every bound variable
            return self.fail(f"Variable '{expr.name}' is not defined")

        if isinstance(expr, Negate):
            return self.infer(expr.operand)

        if isinstance(expr, SetVar):
            return self.infer(expr.value)

        if isinstance(expr, BinaryExpr):
            unit = self.infer_binary(expr)
            logger.debug("Unit of %s: %s", expr, display_unit(unit, debug=True))
            return unit

        # Empty, quit, help and invalid lines have no unit
        return Unit.unknown()

    def infer_binary(self, expr: BinaryExpr) -> Unit:
        left = self.infer(expr.left)
        right = self.infer(expr.right)

        if expr.op == ExprKind.POW:
            return self.infer_pow(expr, left, right)

        if left.is_unknown or right.is_unknown:
            return Unit.unknown()

        if expr.op in (ExprKind.ADD, ExprKind.SUB):
            if check_convertible(right, left) is not None:
                return self.fail(
                    f"Units do not match: {display_unit(left, debug=True)} "
                    f"{expr.op.value} {display_unit(right, debug=True)}"
                )
            return left

        if expr.op == ExprKind.CONVERT:
            reason = check_convertible(left, right)
            if reason is not None:
                return self.fail(
                    f"Cannot convert {display_unit(left, debug=True)} "
                    f"to {display_unit(right, debug=True)}: {reason}"
                )
            return right

        if expr.op in (ExprKind.MUL, ExprKind.CONST_UNIT):
            return combine(left, right)

        if expr.op == ExprKind.COMP_UNIT:
            unit = combine(left, right, reject_same_category=True)
            if unit.is_unknown:
                return self.fail(f"Cannot combine units of the same category: {left} {right}")
            return unit

        if expr.op in (ExprKind.DIV, ExprKind.DIV_UNIT):
            return combine(left, invert(right))

        raise TypeError(f"Unknown binary op: {expr.op}")

    def infer_pow(self, expr: BinaryExpr, left: Unit, right: Unit) -> Unit:
        """``unit ^ n``: multiply the degree of a single-term unit by ``n``."""
        if left.is_unknown or right.is_unknown:
            return Unit.unknown()
        if left.is_none or len(left) != 1 or not right.is_none:
            return self.fail(
                "Expected single degree unit ^ constant: "
                f"{display_unit(left, debug=True)} ^ {display_unit(right, debug=True)}"
            )
        power = self.evaluate_constant(expr.right)
        if self.errors.is_set:
            return Unit.unknown()
        if not math.isfinite(power) or power != int(power):
            return self.fail(f"Degree must be an integer, got {power:g}")
        return raise_degree(left, int(power))
