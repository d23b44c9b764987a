"""
Line sources for a calculator session.

The session loop only needs ``read_line()``; None means the input is
exhausted. The console reader adds prompt and history support on top of the
rich console, the stream reader serves piped input and tests.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol, TextIO

from rich.console import Console

try:
    import readline
except ImportError:  # not available on every platform
    readline = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

MAX_HISTORY = 64


class LineReader(Protocol):
    """Anything that can hand the session its next input line."""

    def read_line(self) -> str | None: ...


class LineHistory:
    """Bounded input history. Blank lines and immediate repeats are skipped."""

    def __init__(self, max_entries: int = MAX_HISTORY) -> None:
        self._entries: deque[str] = deque(maxlen=max_entries)

    def add(self, line: str) -> bool:
        """Record ``line``. Returns False if it was not recorded."""
        if not line.strip():
            return False
        if self._entries and self._entries[-1] == line:
            return False
        self._entries.append(line)
        return True

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ConsoleLineReader:
    """Interactive reader: prompt on the rich console, arrow-key history via readline."""

    def __init__(self, console: Console, prompt: str = ">>> ", history: LineHistory | None = None):
        self.console = console
        self.prompt = prompt
        self.history = history if history is not None else LineHistory()
        if readline is not None:
            readline.set_auto_history(False)
            readline.clear_history()

    def read_line(self) -> str | None:
        try:
            line = self.console.input(self.prompt, markup=False)
        except (EOFError, KeyboardInterrupt):
            # Finish the prompt line before the session ends
            self.console.print()
            return None
        if self.history.add(line):
            if readline is not None:
                # readline has no size cap of its own here; mirror ours
                readline.add_history(line)
                while readline.get_current_history_length() > len(self.history):
                    readline.remove_history_item(0)
        return line


class StreamLineReader:
    """Reads lines from a text stream (stdin, a file) or any iterable of strings."""

    def __init__(self, stream: TextIO | Iterable[str]) -> None:
        self._lines = iter(stream)

    def read_line(self) -> str | None:
        line = next(self._lines, None)
        if line is None:
            return None
        return line.rstrip("\r\n")
