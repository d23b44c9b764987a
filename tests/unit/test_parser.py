"""Tests for the context-sensitive precedence parser."""

from __future__ import annotations

from unitcalc.core.expression_lang.parser import parse, parse_line
from unitcalc.core.expression_lang.tokenizer import tokenize
from unitcalc.core.expression_lang.variables import VariableStore
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Empty,
    ExprKind,
    Help,
    Invalid,
    Negate,
    Quit,
    SetVar,
    UnitLiteral,
    Var,
    const_with_unit,
)
from unitcalc.core.ir.units import Unit, UnitType


def km() -> UnitLiteral:
    return UnitLiteral(unit=Unit.single(UnitType.KILOMETER))


class TestParserLiterals:
    """Single tokens become leaves or markers."""

    def test_number(self) -> None:
        assert parse_line("42") == Constant(value=42.0)

    def test_unit(self) -> None:
        assert parse_line("km") == km()

    def test_variable(self) -> None:
        assert parse_line("x") == Var(name="x")

    def test_empty(self) -> None:
        assert isinstance(parse_line(""), Empty)
        assert isinstance(parse_line("  "), Empty)

    def test_commands(self) -> None:
        assert isinstance(parse_line("quit"), Quit)
        assert isinstance(parse_line("exit"), Quit)
        assert isinstance(parse_line("help"), Help)

    def test_parse_token_list(self) -> None:
        assert parse(tokenize("7")) == Constant(value=7.0)


class TestParserArithmetic:
    """Arithmetic precedence and associativity."""

    def test_mul_binds_tighter_than_add(self) -> None:
        expr = parse_line("1 + 2 * 3")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.ADD
        assert expr.left == Constant(value=1.0)
        assert isinstance(expr.right, BinaryExpr)
        assert expr.right.op == ExprKind.MUL

    def test_sub_is_left_associative(self) -> None:
        expr = parse_line("10 - 4 - 3")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.SUB
        assert expr.right == Constant(value=3.0)
        assert isinstance(expr.left, BinaryExpr)
        assert expr.left.op == ExprKind.SUB

    def test_div_is_left_associative(self) -> None:
        expr = parse_line("8 / 4 / 2")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.DIV
        assert expr.right == Constant(value=2.0)

    def test_leading_negation(self) -> None:
        assert parse_line("-3") == Negate(operand=Constant(value=3.0))

    def test_negation_after_operator(self) -> None:
        expr = parse_line("2 * - 3")
        assert expr == BinaryExpr(
            op=ExprKind.MUL,
            left=Constant(value=2.0),
            right=Negate(operand=Constant(value=3.0)),
        )

    def test_binary_minus_after_operand(self) -> None:
        expr = parse_line("3 - - 2")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.SUB
        assert expr.right == Negate(operand=Constant(value=2.0))

    def test_double_negation(self) -> None:
        assert parse_line("- - 3") == Negate(operand=Negate(operand=Constant(value=3.0)))


class TestParserUnits:
    """Adjacency forms: number-unit, unit-unit, unit division and degrees."""

    def test_const_with_unit(self) -> None:
        assert parse_line("5 km") == BinaryExpr(
            op=ExprKind.CONST_UNIT, left=Constant(value=5.0), right=km()
        )

    def test_composite_unit(self) -> None:
        expr = parse_line("kg m s")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.COMP_UNIT
        # Left-associative: (kg m) s
        assert isinstance(expr.left, BinaryExpr)
        assert expr.left.op == ExprKind.COMP_UNIT
        assert expr.right == UnitLiteral(unit=Unit.single(UnitType.SECOND))

    def test_div_unit(self) -> None:
        expr = parse_line("m / s")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.DIV_UNIT

    def test_div_followed_by_number_is_arithmetic(self) -> None:
        expr = parse_line("10 km / 2")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.DIV

    def test_pow(self) -> None:
        expr = parse_line("s ^ 2")
        assert expr == BinaryExpr(
            op=ExprKind.POW,
            left=UnitLiteral(unit=Unit.single(UnitType.SECOND)),
            right=Constant(value=2.0),
        )

    def test_unit_expression(self) -> None:
        # 10 (m / (s ^ 2))
        expr = parse_line("10 m/s^2")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.CONST_UNIT
        assert isinstance(expr.right, BinaryExpr)
        assert expr.right.op == ExprKind.DIV_UNIT
        assert isinstance(expr.right.right, BinaryExpr)
        assert expr.right.right.op == ExprKind.POW

    def test_negative_degree_binds_to_caret(self) -> None:
        expr = parse_line("- 50 km ^ -2 - 3")
        pow_expr = BinaryExpr(
            op=ExprKind.POW,
            left=km(),
            right=Negate(operand=Constant(value=2.0)),
        )
        assert expr == BinaryExpr(
            op=ExprKind.SUB,
            left=Negate(
                operand=BinaryExpr(
                    op=ExprKind.CONST_UNIT,
                    left=Constant(value=50.0),
                    right=pow_expr,
                )
            ),
            right=Constant(value=3.0),
        )

    def test_convert_binds_loosest_after_assignment(self) -> None:
        expr = parse_line("1 km * 3 -> in")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.CONVERT
        assert isinstance(expr.left, BinaryExpr)
        assert expr.left.op == ExprKind.MUL
        assert expr.right == UnitLiteral(unit=Unit.single(UnitType.INCH))


class TestParserAssignment:
    """Assignment is the loosest binding of all."""

    def test_assignment(self) -> None:
        expr = parse_line("x = 9 + 10")
        assert isinstance(expr, SetVar)
        assert expr.target == Var(name="x")
        assert isinstance(expr.value, BinaryExpr)
        assert expr.value.op == ExprKind.ADD

    def test_assignment_of_unit(self) -> None:
        expr = parse_line("n = kg m s^-2")
        assert isinstance(expr, SetVar)
        assert isinstance(expr.value, BinaryExpr)
        assert expr.value.op == ExprKind.COMP_UNIT


class TestParserVariables:
    """Variables act as numbers or units depending on what they hold."""

    def test_unbound_variable_before_unit(self) -> None:
        expr = parse_line("x km")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.COMP_UNIT
        assert expr.left == Var(name="x")

    def test_numeric_variable_glues_to_unit(self) -> None:
        store = VariableStore()
        store.set("x", const_with_unit(7.0, Unit.none()))
        expr = parse_line("x km", store)
        assert expr == BinaryExpr(op=ExprKind.CONST_UNIT, left=Var(name="x"), right=km())

    def test_unit_variable_composes(self) -> None:
        store = VariableStore()
        store.set("u", km())
        expr = parse_line("s u", store)
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.COMP_UNIT
        assert expr.right == Var(name="u")

    def test_div_by_unit_variable(self) -> None:
        store = VariableStore()
        store.set("u", km())
        expr = parse_line("s / u", store)
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.DIV_UNIT

    def test_div_by_unbound_variable_is_arithmetic(self) -> None:
        expr = parse_line("s / u")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.DIV


class TestParserErrors:
    """Malformed input yields Invalid nodes instead of raising."""

    def test_trailing_operator(self) -> None:
        expr = parse_line("1 +")
        assert isinstance(expr, Invalid)
        assert expr.reason == "Operator '+' is missing an operand"

    def test_leading_operator(self) -> None:
        assert isinstance(parse_line("* 2"), Invalid)

    def test_operators_only(self) -> None:
        expr = parse_line("* / ^")
        assert isinstance(expr, BinaryExpr)
        assert isinstance(expr.left, Invalid)
        assert isinstance(expr.right, Invalid)

    def test_two_numbers(self) -> None:
        expr = parse_line("1 2")
        assert isinstance(expr, BinaryExpr)
        assert expr.op == ExprKind.CONST_UNIT
        assert expr.right == Constant(value=2.0)

    def test_lexical_reason_is_kept(self) -> None:
        expr = parse_line("1e-5")
        assert isinstance(expr, Invalid)
        assert expr.reason is not None
        assert "Negative exponents" in expr.reason

    def test_lexical_reason_in_operand(self) -> None:
        expr = parse_line("2 + $")
        assert isinstance(expr, BinaryExpr)
        assert expr.right == Invalid(reason="Unexpected character '$' at position 4")

    def test_lexical_reason_in_longer_window(self) -> None:
        expr = parse_line("* $")
        assert expr == Invalid(reason="Unexpected character '$' at position 2")
