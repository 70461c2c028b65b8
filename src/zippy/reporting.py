"""User-facing progress and error reporting.

Pipelines never print directly; they call a :class:`Reporter`. The default
:class:`ConsoleReporter` writes one tagged line per message to standard
output, :class:`LoggingReporter` forwards to :mod:`logging`, and
:class:`MemoryReporter` keeps messages in memory so callers can inspect them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from rich.console import Console
from rich.markup import escape

from .errors import ZippyError

Severity = Literal["error", "warning", "success", "info"]


class Reporter(Protocol):
    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...


_TAGS: dict[str, str] = {
    "error": "[red]ERROR:[/red]",
    "warning": "[yellow]WARNING:[/yellow]",
    "success": "[green]SUCCESS:[/green]",
    "info": "[blue]LOG:[/blue]",
}


class ConsoleReporter:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)

    def _emit(self, severity: Severity, message: str) -> None:
        # Paths may contain square brackets; keep them out of rich markup.
        self.console.print(f"{_TAGS[severity]} {escape(message)}")

    def error(self, message: str) -> None:
        self._emit("error", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def info(self, message: str) -> None:
        self._emit("info", message)


_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "success": logging.INFO,
    "info": logging.INFO,
}


class LoggingReporter:
    """Forward messages to a :class:`logging.Logger`.

    ``success`` has no logging level of its own and is logged at ``INFO``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("zippy")

    def error(self, message: str) -> None:
        self.logger.log(_LEVELS["error"], message)

    def warning(self, message: str) -> None:
        self.logger.log(_LEVELS["warning"], message)

    def success(self, message: str) -> None:
        self.logger.log(_LEVELS["success"], message)

    def info(self, message: str) -> None:
        self.logger.log(_LEVELS["info"], message)


@dataclass
class MemoryReporter:
    messages: list[tuple[Severity, str]] = field(default_factory=list)

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def of(self, severity: Severity) -> list[str]:
        return [message for level, message in self.messages if level == severity]


def default_reporter() -> Reporter:
    return ConsoleReporter()


def report_error(reporter: Reporter, exc: ZippyError) -> None:
    """Report ``exc`` and, on a second line, the library text it carries."""

    reporter.error(str(exc))
    detail = getattr(exc, "detail", None)
    if detail:
        reporter.error(f"    {detail}")


__all__ = [
    "ConsoleReporter",
    "LoggingReporter",
    "MemoryReporter",
    "Reporter",
    "Severity",
    "default_reporter",
    "report_error",
]
