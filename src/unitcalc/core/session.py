"""
Line execution for a unitcalc session.

A ``Session`` owns the variable store and the configuration; every input
line runs through the full pipeline against it:

    tokenize -> parse -> substitute -> check_valid -> (assign | infer_unit -> evaluate)

Usage:
    session = Session()
    session.execute("x = 5 km").output   # "x = 5 km"
    session.execute("x -> m").output     # "5000 m"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from unitcalc.core.config import CalculatorConfig
from unitcalc.core.errors import ErrorString
from unitcalc.core.expression_lang.evaluator import evaluate
from unitcalc.core.expression_lang.parser import parse
from unitcalc.core.expression_lang.tokenizer import tokenize
from unitcalc.core.expression_lang.unit_algebra import display_unit
from unitcalc.core.expression_lang.unit_checker import infer_unit
from unitcalc.core.expression_lang.validity import check_valid
from unitcalc.core.expression_lang.variables import VariableStore, assign, substitute
from unitcalc.core.ir.expressions import (
    BinaryExpr,
    Constant,
    Empty,
    Expr,
    Help,
    Quit,
    SetVar,
    UnitLiteral,
    Var,
    is_number,
)
from unitcalc.core.ir.units import Unit

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Hello! Here's some stuff you can do:
Math: 1 + 2 * 3 - 4 / 5
Math with units: 1km/2s*3km+4km^2s^-1
Convert units: 10 m/s^2 -> km/h^2
Auto-convert units: 10 km - 2 m + 12 mi
Variables: x = 9 + 10
Unit aliases: n = kg m s^-2"""


class LineResultKind(StrEnum):
    """What a line produced."""

    VALUE = "value"
    UNIT = "unit"
    ASSIGNMENT = "assignment"
    HELP = "help"
    EMPTY = "empty"
    QUIT = "quit"
    ERROR = "error"


@dataclass(frozen=True)
class LineResult:
    """Outcome of one line. ``output`` is the text to print ("" for nothing)."""

    kind: LineResultKind
    output: str = ""
    value: float | None = None
    unit: Unit | None = None

    @property
    def is_error(self) -> bool:
        return self.kind == LineResultKind.ERROR

    @property
    def quit(self) -> bool:
        return self.kind == LineResultKind.QUIT


def format_number(value: float, precision: int = 10) -> str:
    """``%g`` formatting with ``precision`` significant digits."""
    return f"{value:.{precision}g}"


def format_value(value: float, unit: Unit, precision: int = 10, debug_units: bool = False) -> str:
    """``<value> <unit>``, dropping the unit part when it displays as nothing."""
    parts = [format_number(value, precision), display_unit(unit, debug=debug_units)]
    return " ".join(part for part in parts if part)


@dataclass
class Session:
    """One calculator session: variables persist from line to line."""

    config: CalculatorConfig = field(default_factory=CalculatorConfig)
    store: VariableStore = field(default_factory=VariableStore)

    def execute(self, line: str) -> LineResult:
        """Run one input line through the pipeline.

        User errors never raise; they come back as an ERROR result whose
        output is the line's diagnostic.
        """
        repl = self.config.repl
        errors = ErrorString()

        tokens = tokenize(line, repl.max_line_length)
        expr = substitute(parse(tokens, self.store), self.store)

        if not check_valid(expr, errors):
            return self._error(errors)

        if isinstance(expr, Empty):
            return LineResult(LineResultKind.EMPTY)
        if isinstance(expr, Help):
            return LineResult(LineResultKind.HELP, HELP_TEXT)
        if isinstance(expr, Quit):
            return LineResult(LineResultKind.QUIT)
        if isinstance(expr, SetVar):
            return self._assign(expr, errors)

        unit = infer_unit(expr, errors, lambda e: evaluate(e, errors))
        if unit.is_unknown:
            return self._error(errors)

        if not is_number(expr):
            return LineResult(LineResultKind.UNIT, self._unit_text(unit), unit=unit)

        value = evaluate(expr, errors)
        if errors.is_set:
            return self._error(errors)
        return LineResult(
            LineResultKind.VALUE,
            format_value(value, unit, repl.precision, repl.debug_units),
            value=value,
            unit=unit,
        )

    def _assign(self, statement: SetVar, errors: ErrorString) -> LineResult:
        stored = assign(statement, self.store, errors)
        if stored is None:
            return self._error(errors)

        assert isinstance(statement.target, Var)
        name = statement.target.name
        if isinstance(stored, BinaryExpr):
            assert isinstance(stored.left, Constant) and isinstance(stored.right, UnitLiteral)
            value, unit = stored.left.value, stored.right.unit
            text = format_value(value, unit, self.config.repl.precision, self.config.repl.debug_units)
            return LineResult(LineResultKind.ASSIGNMENT, f"{name} = {text}", value=value, unit=unit)

        assert isinstance(stored, UnitLiteral)
        return LineResult(
            LineResultKind.ASSIGNMENT,
            f"{name} = {self._unit_text(stored.unit)}",
            unit=stored.unit,
        )

    def _unit_text(self, unit: Unit) -> str:
        # A bare unit line that cancels out still prints something
        return display_unit(unit, debug=self.config.repl.debug_units) or "none"

    def _error(self, errors: ErrorString) -> LineResult:
        message = errors.message or "Invalid expression"
        logger.debug("Line failed: %s", message)
        return LineResult(LineResultKind.ERROR, message)

    def variables(self) -> dict[str, Expr]:
        """Snapshot of the current bindings."""
        return {name: value for name, value in self.store.items()}


def execute_line(line: str, session: Session | None = None) -> LineResult:
    """Execute a single line, in ``session`` or in a fresh one."""
    return (session or Session()).execute(line)
