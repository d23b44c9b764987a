"""
unitcalc expression language.

Tokenizer, parser, validity check, unit checker, evaluator and variable
store for the unit-aware calculator language.

Usage:
    from unitcalc.core.expression_lang import parse_line, infer_unit, evaluate

    errors = ErrorString()
    expr = parse_line("10 km - 2 m")
    unit = infer_unit(expr, errors, lambda e: evaluate(e, errors))
    result = evaluate(expr, errors)
    # result == 9.998, unit == km
"""

from unitcalc.core.expression_lang.evaluator import evaluate
from unitcalc.core.expression_lang.parser import parse, parse_line
from unitcalc.core.expression_lang.tokenizer import Token, TokenKind, tokenize
from unitcalc.core.expression_lang.unit_checker import infer_unit
from unitcalc.core.expression_lang.validity import check_valid
from unitcalc.core.expression_lang.variables import VariableStore, assign, substitute

__all__ = [
    "Token",
    "TokenKind",
    "VariableStore",
    "assign",
    "check_valid",
    "evaluate",
    "infer_unit",
    "parse",
    "parse_line",
    "substitute",
    "tokenize",
]
