"""
Rich console output for the unitcalc CLI.

Results print as plain text; diagnostics are styled and go to stderr.
"""

from rich.console import Console
from rich.style import Style
from rich.text import Text

from unitcalc.core.session import LineResult, LineResultKind

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

# Style definitions
STYLES = {
    "title": Style(color="bright_cyan", bold=True),
    "subtitle": Style(color="bright_black"),
    "result": Style(),
    "assignment": Style(color="cyan"),
    "help": Style(color="bright_black"),
    "error": Style(color="red", bold=True),
}

_RESULT_STYLES = {
    LineResultKind.VALUE: "result",
    LineResultKind.UNIT: "result",
    LineResultKind.ASSIGNMENT: "assignment",
    LineResultKind.HELP: "help",
    LineResultKind.ERROR: "error",
}


def print_header(title: str, subtitle: str = "") -> None:
    """Print a styled header."""
    console.print(Text(title, style=STYLES["title"]))
    if subtitle:
        console.print(Text(subtitle, style=STYLES["subtitle"]))


def print_result(result: LineResult) -> None:
    """Print a line's output. Lines with nothing to say print nothing."""
    if not result.output:
        return
    style = STYLES[_RESULT_STYLES.get(result.kind, "result")]
    console.print(Text(result.output, style=style))


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(Text(f"✗ {message}", style=STYLES["error"]))
