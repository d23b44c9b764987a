"""The read-execute-print loop shared by the ``repl`` and ``eval`` commands."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from unitcalc.cli.reader import LineReader
from unitcalc.core.session import LineResult, Session

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """What happened while draining one reader."""

    lines: int = 0
    failures: int = 0
    quit: bool = False


def run_session(
    session: Session,
    reader: LineReader,
    emit: Callable[[LineResult], None],
) -> RunSummary:
    """Execute lines from ``reader`` until it is exhausted or a line quits.

    Args:
        session: Session holding the variables.
        reader: Source of input lines.
        emit: Called with every line's result.
    """
    summary = RunSummary()
    while True:
        line = reader.read_line()
        if line is None:
            logger.debug("End of input after %d lines", summary.lines)
            break

        result = session.execute(line)
        summary.lines += 1
        emit(result)
        if result.is_error:
            summary.failures += 1
        if result.quit:
            summary.quit = True
            break

    return summary
