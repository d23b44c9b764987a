"""Shared pytest fixtures for unitcalc tests."""

import pytest

from unitcalc.core.config import CalculatorConfig
from unitcalc.core.errors import ErrorString
from unitcalc.core.expression_lang.variables import VariableStore
from unitcalc.core.session import Session


@pytest.fixture
def errors() -> ErrorString:
    """Return a fresh per-line diagnostic."""
    return ErrorString()


@pytest.fixture
def store() -> VariableStore:
    """Return an empty variable store."""
    return VariableStore()


@pytest.fixture
def config() -> CalculatorConfig:
    """Return the default configuration."""
    return CalculatorConfig()


@pytest.fixture
def session(config: CalculatorConfig, store: VariableStore) -> Session:
    """Return a session sharing the ``store`` fixture."""
    return Session(config=config, store=store)
