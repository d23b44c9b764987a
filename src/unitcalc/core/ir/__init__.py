"""
unitcalc Intermediate Representation (IR) types.

Units and the expression AST. All types are re-exported from this package.
"""

from .expressions import (
    BINARY_KINDS,
    NUMBER_KINDS,
    UNIT_KINDS,
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
    const_with_unit,
    is_number,
    is_unit,
)
from .units import (
    CONVERSION_TABLE,
    UNIT_SYMBOLS,
    Unit,
    UnitCategory,
    UnitTerm,
    UnitType,
    table_factor,
    unit_category,
)

__all__ = [
    # Expressions
    "BINARY_KINDS",
    "NUMBER_KINDS",
    "UNIT_KINDS",
    "BinaryExpr",
    "Constant",
    "Empty",
    "Expr",
    "ExprKind",
    "Help",
    "Invalid",
    "Negate",
    "Quit",
    "SetVar",
    "UnitLiteral",
    "Var",
    "const_with_unit",
    "is_number",
    "is_unit",
    # Units
    "CONVERSION_TABLE",
    "UNIT_SYMBOLS",
    "Unit",
    "UnitCategory",
    "UnitTerm",
    "UnitType",
    "table_factor",
    "unit_category",
]
