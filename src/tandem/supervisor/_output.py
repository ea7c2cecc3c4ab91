"""Reporter implementations for the supervisor system.

This module provides concrete implementations of the Reporter protocol
for displaying supervisor narration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ._models import Report, ReportKind

if TYPE_CHECKING:
    from tandem.exceptions import SupervisorError


@final
class ConsoleReporter:
    """Reporter that writes narration to stderr.

    Formats reports as `[tandem] message`, with the task name in the
    prefix when one is involved, and colour codes them by kind.
    """

    __slots__ = ("_console", "_error_style", "_report_styles")

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the reporter.

        Args:
            console: Rich Console instance for output. If None, creates one
                writing to stderr.
        """
        self._console = console or Console(stderr=True)
        self._error_style = Style(color="red", bold=True)
        self._report_styles: dict[ReportKind, Style] = {
            ReportKind.STARTING: Style(dim=True),
            ReportKind.READY: Style(color="green", bold=True),
            ReportKind.SIGNAL: Style(color="yellow"),
            ReportKind.TRIGGER: Style(color="red", bold=True),
            ReportKind.COMPLETE: Style(color="yellow"),
        }

    def write_report(self, report: Report) -> None:
        """Write a narration line with a styled prefix.

        Args:
            report: The narration record.
        """
        style = self._report_styles.get(report.kind, Style())

        text = Text()
        _ = text.append(_prefix(report.task_name), style=Style(color="blue", bold=True))
        _ = text.append(" ")
        _ = text.append(report.message, style=style)

        self._console.print(text, soft_wrap=True)

    def write_error(self, error: SupervisorError) -> None:
        """Write an error line.

        Args:
            error: The error to display.
        """
        text = Text()
        _ = text.append(_prefix(None), style=Style(color="blue", bold=True))
        _ = text.append(" ")
        _ = text.append(str(error), style=self._error_style)

        self._console.print(text, soft_wrap=True)


@final
class RecordingReporter:
    """Reporter that keeps everything it is given in memory."""

    __slots__ = ("errors", "reports")

    def __init__(self) -> None:
        self.reports: list[Report] = []
        self.errors: list[SupervisorError] = []

    @property
    def messages(self) -> list[str]:
        """Return the report messages in order."""
        return [report.message for report in self.reports]

    def write_report(self, report: Report) -> None:
        self.reports.append(report)

    def write_error(self, error: SupervisorError) -> None:
        self.errors.append(error)


def _prefix(task_name: str | None) -> str:
    if task_name is None:
        return "[tandem]"
    return f"[tandem:{task_name}]"
