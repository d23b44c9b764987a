"""
Error types for unitcalc.

User input never raises: problems with a line are recorded in an
``ErrorString`` and reported as that line's output. The exception classes
below are for configuration problems and for internal invariant violations.
"""

import logging

logger = logging.getLogger(__name__)


class UnitcalcError(Exception):
    """Base exception for all unitcalc errors."""

    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Prefix the message with its source (a file path) if available."""
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class ConfigError(UnitcalcError):
    """
    Raised when a configuration file cannot be used.

    Examples:
    - Malformed TOML
    - A setting with the wrong value type
    - A non-positive line length or precision
    """

    pass


class ExpressionEvalError(UnitcalcError):
    """
    Raised when the evaluator reaches a node it cannot evaluate.

    Only possible if a tree skipped the validity and unit checks.
    """

    pass


class VariableStoreError(UnitcalcError):
    """
    Raised when a value that is not a normalized result is stored.

    Stored values must be ``ConstWithUnit(Constant, UnitLiteral)`` or a bare
    ``UnitLiteral``.
    """

    pass


class ErrorString:
    """
    The single diagnostic for one input line.

    Write-once: the first reported message wins and later reports are
    ignored, so a stage that runs after a failure cannot mask its cause.
    """

    __slots__ = ("_message",)

    def __init__(self) -> None:
        self._message: str | None = None

    @property
    def is_set(self) -> bool:
        return self._message is not None

    @property
    def message(self) -> str | None:
        return self._message

    def report(self, message: str) -> bool:
        """Record ``message`` unless an error is already set.

        Returns:
            True if this message became the line's error.
        """
        if self._message is not None:
            logger.debug("Suppressed error %r (already failed: %r)", message, self._message)
            return False
        logger.debug("Error: %s", message)
        self._message = message
        return True

    def __bool__(self) -> bool:
        return self.is_set

    def __repr__(self) -> str:
        return f"ErrorString({self._message!r})"
