"""
Expression AST for the unitcalc language.

One statement per line is parsed into a tree of these nodes:
- Leaves: numeric constants, unit literals, variable references
- Negation of a sub-expression
- Assignment: ``x = <expr>``
- Binary nodes: arithmetic, conversion (``->``), unit degree (``^``) and the
  implicit forms produced by adjacency (``5 km``, ``kg m``, ``m / s``)
- Markers for blank lines, ``quit``/``exit``, ``help`` and unparseable input

Nodes are immutable; substitution builds new trees.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from unitcalc.core.ir.units import Unit

# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------


class ExprKind(StrEnum):
    """Every node kind. The value is the name used in diagnostics."""

    CONSTANT = "const"
    UNIT = "unit"
    NEG = "negation"
    VAR = "var"
    SET_VAR = "set var"
    CONST_UNIT = "const x unit"
    COMP_UNIT = "unit x unit"
    DIV_UNIT = "div unit"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    CONVERT = "->"
    POW = "^"
    EMPTY = "empty"
    QUIT = "quit"
    HELP = "help"
    INVALID = "invalid"


BINARY_KINDS = frozenset(
    {
        ExprKind.CONST_UNIT,
        ExprKind.COMP_UNIT,
        ExprKind.DIV_UNIT,
        ExprKind.ADD,
        ExprKind.SUB,
        ExprKind.MUL,
        ExprKind.DIV,
        ExprKind.CONVERT,
        ExprKind.POW,
    }
)

NUMBER_KINDS = frozenset(
    {
        ExprKind.CONSTANT,
        ExprKind.NEG,
        ExprKind.CONST_UNIT,
        ExprKind.ADD,
        ExprKind.SUB,
        ExprKind.MUL,
        ExprKind.DIV,
        ExprKind.CONVERT,
    }
)

UNIT_KINDS = frozenset(
    {
        ExprKind.UNIT,
        ExprKind.COMP_UNIT,
        ExprKind.POW,
        ExprKind.DIV_UNIT,
    }
)


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Constant(BaseModel):
    """A dimensionless number."""

    value: float

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.CONSTANT

    def __str__(self) -> str:
        return f"{self.value:g}"


class UnitLiteral(BaseModel):
    """A unit on its own, e.g. ``km`` or a stored ``kg m s^-2``."""

    unit: Unit

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.UNIT

    def __str__(self) -> str:
        return str(self.unit) or "none"


class Var(BaseModel):
    """Reference to a user variable."""

    name: str = Field(description="Variable name")

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.VAR

    def __str__(self) -> str:
        return self.name


class Negate(BaseModel):
    """Unary minus."""

    operand: Expr

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.NEG

    def __str__(self) -> str:
        return f"-{self.operand}"


class BinaryExpr(BaseModel):
    """Binary node: ``left <kind> right``. Owns both children."""

    op: ExprKind
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return self.op

    def __str__(self) -> str:
        if self.op in (ExprKind.CONST_UNIT, ExprKind.COMP_UNIT):
            return f"({self.left} {self.right})"
        if self.op == ExprKind.DIV_UNIT:
            return f"({self.left} / {self.right})"
        return f"({self.left} {self.op.value} {self.right})"


class SetVar(BaseModel):
    """Assignment: ``target = value``."""

    target: Expr
    value: Expr

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.SET_VAR

    def __str__(self) -> str:
        return f"{self.target} = {self.value}"


class Empty(BaseModel):
    """A blank line."""

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.EMPTY

    def __str__(self) -> str:
        return "<empty>"


class Quit(BaseModel):
    """``quit`` / ``exit``."""

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.QUIT

    def __str__(self) -> str:
        return "<quit>"


class Help(BaseModel):
    """``help``."""

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.HELP

    def __str__(self) -> str:
        return "<help>"


class Invalid(BaseModel):
    """Unparseable input. ``reason`` is set when a lexical error caused it."""

    reason: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ExprKind:
        return ExprKind.INVALID

    def __str__(self) -> str:
        return "<invalid>"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = Constant | UnitLiteral | Var | Negate | BinaryExpr | SetVar | Empty | Quit | Help | Invalid

# Rebuild models for recursive forward references
Negate.model_rebuild()
BinaryExpr.model_rebuild()
SetVar.model_rebuild()


# ---------------------------------------------------------------------------
# Constructors and classification
# ---------------------------------------------------------------------------


def const_with_unit(value: float, unit: Unit) -> BinaryExpr:
    """The normalized form of a stored number: ``ConstWithUnit(value, unit)``."""
    return BinaryExpr(
        op=ExprKind.CONST_UNIT,
        left=Constant(value=value),
        right=UnitLiteral(unit=unit),
    )


def is_number(expr: Expr) -> bool:
    """True if the statement yields a number (printed as ``<value> <unit>``)."""
    if isinstance(expr, BinaryExpr) and expr.op == ExprKind.DIV:
        return not is_unit(expr)
    return expr.kind in NUMBER_KINDS


def is_unit(expr: Expr) -> bool:
    """True if the expression only describes a unit."""
    if isinstance(expr, BinaryExpr) and expr.op == ExprKind.DIV:
        return is_unit(expr.left) and is_unit(expr.right)
    return expr.kind in UNIT_KINDS
