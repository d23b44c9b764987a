"""
unitcalc CLI.

- ``unitcalc repl``: interactive session
- ``unitcalc eval EXPR...``: run expressions in one session and print results

Global options load ``unitcalc.toml`` and configure logging before any
command runs; the resulting CalculatorConfig is passed on through the typer
context.
"""

import logging
import platform
import sys
from pathlib import Path

import typer

from unitcalc import __version__
from unitcalc.cli.reader import ConsoleLineReader, StreamLineReader
from unitcalc.cli.repl import run_session
from unitcalc.cli.ui import console, print_error, print_header, print_result
from unitcalc.core.config import CalculatorConfig, find_config, load_config
from unitcalc.core.errors import ConfigError
from unitcalc.core.session import Session

logger = logging.getLogger(__name__)


def get_version() -> str:
    """Get unitcalc version from package metadata or fallback to __version__."""
    try:
        from importlib.metadata import version

        return version("unitcalc")
    except Exception:
        # Fallback if not installed as package
        return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"unitcalc version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(
            f"  Python:        {platform.python_implementation()} {platform.python_version()}"
        )
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


# =============================================================================
# Main Application
# =============================================================================

app = typer.Typer(
    help="""unitcalc – a calculator that understands units

Examples:
  unitcalc eval "10 km - 2 m + 12 mi"
  unitcalc eval "x = 5 km" "x -> m"
  unitcalc repl
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    config_path: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to unitcalc.toml (default: ./unitcalc.toml if present)",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR); overrides the config file",
    ),
) -> None:
    """unitcalc CLI main callback for global options."""
    path = config_path if config_path is not None else find_config()
    try:
        config = load_config(path) if path is not None else CalculatorConfig()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    configure_logging(log_level or config.logging.level)
    if path is not None:
        logger.info("Using config %s", path)
    ctx.obj = config


def _config(ctx: typer.Context) -> CalculatorConfig:
    return ctx.obj if isinstance(ctx.obj, CalculatorConfig) else CalculatorConfig()


@app.command()
def repl(ctx: typer.Context) -> None:
    """
    Start an interactive session.

    Type 'help' for examples; 'quit', 'exit' or end-of-input leaves.
    """
    config = _config(ctx)
    session = Session(config=config)
    if sys.stdin.isatty():
        print_header("unitcalc", "Type 'help' for examples, 'quit' to exit")
    reader = ConsoleLineReader(console, prompt=config.repl.prompt)
    run_session(session, reader, print_result)


@app.command(name="eval")
def eval_command(
    ctx: typer.Context,
    expressions: list[str] = typer.Argument(  # noqa: B008
        ...,
        help="Lines to execute in order; '-' reads lines from stdin",
    ),
) -> None:
    """
    Execute expressions in a single session and print each result.

    Variables assigned by one expression are visible to the next. Exits with
    status 1 if any line produced an error.
    """
    session = Session(config=_config(ctx))
    failures = 0
    for expression in expressions:
        reader = StreamLineReader(sys.stdin if expression == "-" else [expression])
        summary = run_session(session, reader, print_result)
        failures += summary.failures
        if summary.quit:
            break

    if failures:
        raise typer.Exit(code=1)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = [
    "__version__",
    "app",
    "main",
    "get_version",
    "version_callback",
]


if __name__ == "__main__":
    main(sys.argv[1:])
