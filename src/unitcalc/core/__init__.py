"""Core unitcalc functionality: IR, expression pipeline, session, configuration."""

from . import ir
from .config import CalculatorConfig, load_config
from .errors import (
    ConfigError,
    ErrorString,
    ExpressionEvalError,
    UnitcalcError,
    VariableStoreError,
)
from .session import LineResult, LineResultKind, Session, execute_line

__all__ = [
    "ir",
    "UnitcalcError",
    "ConfigError",
    "ExpressionEvalError",
    "VariableStoreError",
    "ErrorString",
    "CalculatorConfig",
    "load_config",
    "Session",
    "LineResult",
    "LineResultKind",
    "execute_line",
]
