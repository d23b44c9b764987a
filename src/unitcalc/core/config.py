import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from unitcalc.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "unitcalc.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ReplConfig:
    """Line handling and output formatting."""

    prompt: str = ">>> "
    max_line_length: int = 256
    precision: int = 10  # significant digits in printed values
    debug_units: bool = False  # print "none" for dimensionless results


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class CalculatorConfig:
    """Calculator configuration.

    Examples in unitcalc.toml:

        [repl]
        prompt = "calc> "
        precision = 6

        [logging]
        level = "DEBUG"
    """

    repl: ReplConfig = field(default_factory=ReplConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _get(section: dict[str, Any], key: str, expected: type, default: Any, source: str) -> Any:
    """Read ``key`` from a table, checking its type. Missing keys use ``default``."""
    if key not in section:
        return default
    value = section[key]
    # bool is an int subclass; never accept it for numeric settings
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigError(
            f"'{key}' must be of type {expected.__name__}, got {type(value).__name__}",
            source=source,
        )
    return value


def _table(data: dict[str, Any], name: str, source: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table", source=source)
    return section


def parse_config(data: dict[str, Any], source: str = "<config>") -> CalculatorConfig:
    """Build a CalculatorConfig from parsed TOML. Unknown keys are ignored."""
    repl_data = _table(data, "repl", source)
    logging_data = _table(data, "logging", source)

    defaults = ReplConfig()
    repl = ReplConfig(
        prompt=_get(repl_data, "prompt", str, defaults.prompt, source),
        max_line_length=_get(
            repl_data, "max_line_length", int, defaults.max_line_length, source
        ),
        precision=_get(repl_data, "precision", int, defaults.precision, source),
        debug_units=_get(repl_data, "debug_units", bool, defaults.debug_units, source),
    )
    if repl.max_line_length <= 0:
        raise ConfigError("'max_line_length' must be positive", source=source)
    if repl.precision <= 0:
        raise ConfigError("'precision' must be positive", source=source)

    level = _get(logging_data, "level", str, LoggingConfig().level, source).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(
            f"'level' must be one of {', '.join(_LOG_LEVELS)}, got {level!r}", source=source
        )

    return CalculatorConfig(repl=repl, logging=LoggingConfig(level=level))


def load_config(path: Path) -> CalculatorConfig:
    """Load configuration from a unitcalc.toml file.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or holds
            a setting of the wrong type.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config: {e.strerror or e}", source=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", source=str(path)) from e

    logger.debug("Loaded config from %s", path)
    return parse_config(data, source=str(path))


def find_config(start: Path | None = None) -> Path | None:
    """Return ``unitcalc.toml`` in ``start`` (default: the working directory), if present."""
    directory = start if start is not None else Path.cwd()
    candidate = directory / CONFIG_FILENAME
    return candidate if candidate.is_file() else None
