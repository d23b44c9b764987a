"""
Session variables for unitcalc.

The store maps names to already-evaluated values: a number with its unit
(``ConstWithUnit``) or a bare unit (``UnitLiteral``). Values are deep-copied
on the way in so nothing built for a single line outlives that line.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from unitcalc.core.errors import ErrorString, VariableStoreError
from unitcalc.core.expression_lang.evaluator import evaluate
from unitcalc.core.expression_lang.unit_checker import infer_unit
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Expr,
    ExprKind,
    Negate,
    SetVar,
    UnitLiteral,
    Var,
    const_with_unit,
    is_number,
)

logger = logging.getLogger(__name__)


def _is_normalized(value: Expr) -> bool:
    if isinstance(value, UnitLiteral):
        return True
    return (
        isinstance(value, BinaryExpr)
        and value.op == ExprKind.CONST_UNIT
        and isinstance(value.left, Constant)
        and isinstance(value.right, UnitLiteral)
    )


class VariableStore:
    """Name → evaluated value, for the lifetime of a session.

    Entries are created or overwritten by assignments and never deleted.
    """

    def __init__(self) -> None:
        self._values: dict[str, Expr] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def items(self) -> Iterator[tuple[str, Expr]]:
        return iter(self._values.items())

    def get(self, name: str) -> Expr | None:
        """The stored value, or None if ``name`` was never assigned."""
        return self._values.get(name)

    def set(self, name: str, value: Expr) -> None:
        """Store a deep copy of ``value`` under ``name``.

        Raises:
            VariableStoreError: If ``value`` is not a normalized result, which
                also guarantees stored values never reference variables.
        """
        if not _is_normalized(value):
            raise VariableStoreError(
                f"Cannot store {value.kind.value} expression for '{name}': "
                "expected a number with a unit or a unit"
            )
        self._values[name] = value.model_copy(deep=True)
        logger.debug("Stored %s = %s", name, value)

    def holds_number(self, name: str) -> bool:
        value = self._values.get(name)
        return value is not None and value.kind == ExprKind.CONST_UNIT

    def holds_unit(self, name: str) -> bool:
        value = self._values.get(name)
        return value is not None and value.kind == ExprKind.UNIT


def substitute(expr: Expr, store: VariableStore) -> Expr:
    """Replace every bound ``Var`` with a copy of its stored value.

    Unbound variables are left in place for the checks to report. The target
    of an assignment is never replaced. Stored values contain no variables,
    so a single pass is complete.
    """
    if isinstance(expr, Var):
        value = store.get(expr.name)
        if value is None:
            return expr
        return value.model_copy(deep=True)

    if isinstance(expr, Negate):
        return Negate(operand=substitute(expr.operand, store))

    if isinstance(expr, BinaryExpr):
        return BinaryExpr(
            op=expr.op,
            left=substitute(expr.left, store),
            right=substitute(expr.right, store),
        )

    if isinstance(expr, SetVar):
        return SetVar(target=expr.target, value=substitute(expr.value, store))

    return expr


def assign(statement: SetVar, store: VariableStore, errors: ErrorString) -> Expr | None:
    """Execute ``name = value``: evaluate, normalize and store the value.

    Args:
        statement: A validated assignment whose target is a ``Var``.
        store: Session variables to update.
        errors: The line's diagnostic.

    Returns:
        The stored value (``ConstWithUnit`` or ``UnitLiteral``), or None if
        the value could not be evaluated; the store is unchanged then.
    """
    if errors.is_set:
        return None
    if not isinstance(statement.target, Var):
        raise VariableStoreError(f"Cannot assign to {statement.target.kind.value} expression")

    value_expr = statement.value
    unit = infer_unit(value_expr, errors, lambda e: evaluate(e, errors))
    if unit.is_unknown:
        return None

    value: Expr
    if is_number(value_expr):
        number = evaluate(value_expr, errors)
        if errors.is_set:
            return None
        value = const_with_unit(number, unit)
    else:
        value = UnitLiteral(unit=unit)

    store.set(statement.target.name, value)
    return store.get(statement.target.name)
