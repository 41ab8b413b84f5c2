"""Console listener for trellis run output using Rich."""

from __future__ import annotations

import os
import platform
import sys
import time
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.traceback import Traceback

from trellis.description import Description
from trellis.notification import Failure, RunListener
from trellis.outcomes import FailTest
from trellis.version import __version__


class TestStatus(Enum):
    """Outcome of one leaf as seen by the console."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    IGNORED = "ignored"


_STATUS_CONFIG: dict[TestStatus, tuple[str, str, str]] = {
    TestStatus.PASSED: ("✓", "green", "PASSED"),
    TestStatus.FAILED: ("✗", "red", "FAILED"),
    TestStatus.SKIPPED: ("-", "yellow", "SKIPPED"),
    TestStatus.IGNORED: ("i", "blue", "IGNORED"),
}


class ConsoleListener(RunListener):
    """Listener that prints run progress and results using Rich formatting.

    Verbosity -1 prints only failures and the summary, 0 prints one symbol per
    test grouped by class, 1 prints one line per test and 2 adds locals to
    tracebacks.
    """

    def __init__(self, console: Console | None = None, verbosity: int = 0) -> None:
        self.console = console or Console(file=sys.__stdout__)
        self.verbosity = verbosity
        self._failures: list[Failure] = []
        self._counts: dict[TestStatus, int] = dict.fromkeys(TestStatus, 0)
        self._status: dict[Description, TestStatus] = {}
        self._started: dict[Description, float] = {}
        self._reasons: dict[Description, str] = {}
        self._current_class: str | None = None
        self._run_start: float | None = None

    def _status_symbol(self, status: TestStatus) -> str:
        return _STATUS_CONFIG[status][0]

    def _status_color(self, status: TestStatus) -> str:
        return _STATUS_CONFIG[status][1]

    def _status_label(self, status: TestStatus) -> str:
        return _STATUS_CONFIG[status][2]

    def _print_section_header(self, title: str) -> None:
        width = self.console.width
        header_title = f" {title} "
        fill = max(width - len(header_title), 0)
        left = fill // 2
        right = fill - left
        self.console.print("=" * left + header_title + "=" * right)

    def _print_run_header(self, description: Description) -> None:
        self._print_section_header("TRELLIS RUN STARTS")
        self.console.print(
            f"platform {platform.platform()} -- python {sys.version.split()[0]} -- trellis {__version__}"
        )
        self.console.print(f"rootdir: {os.getcwd()}")
        self.console.print()
        if self.verbosity >= 0:
            self.console.print(f"[bold]Collected {description.test_count()} tests[/bold]\n")

    def test_run_started(self, description: Description) -> None:
        self._run_start = time.perf_counter()
        self._print_run_header(description)

    def test_started(self, description: Description) -> None:
        self._started[description] = time.perf_counter()
        self._status[description] = TestStatus.PASSED

    def test_failure(self, failure: Failure) -> None:
        self._failures.append(failure)
        self._status[failure.description] = TestStatus.FAILED
        if failure.description not in self._started:
            # Failures outside a test window, e.g. a removed listener.
            self._complete(failure.description, TestStatus.FAILED, 0.0)

    def test_assumption_failure(self, failure: Failure) -> None:
        if self._status.get(failure.description) != TestStatus.FAILED:
            self._status[failure.description] = TestStatus.SKIPPED
            self._reasons[failure.description] = failure.message or "assumption failed"

    def test_ignored(self, description: Description) -> None:
        self._complete(description, TestStatus.IGNORED, 0.0)

    def test_finished(self, description: Description) -> None:
        start = self._started.pop(description, None)
        duration_ms = (time.perf_counter() - start) * 1000 if start is not None else 0.0
        status = self._status.pop(description, TestStatus.PASSED)
        self._complete(description, status, duration_ms)

    def _complete(self, description: Description, status: TestStatus, duration_ms: float) -> None:
        self._counts[status] += 1
        if self.verbosity < 0:
            return
        if self.verbosity == 0:
            self._print_compact_test(description, status)
            return
        self._print_test_line(description, status, duration_ms)

    def _print_compact_test(self, description: Description, status: TestStatus) -> None:
        color = self._status_color(status)
        symbol = f"[{color}]{self._status_symbol(status)}[/{color}]"
        group = description.class_name or description.display_name
        if self._current_class != group:
            if self._current_class is not None:
                self.console.print()
            self.console.print(f" • {escape(group)} ", end="")
            self._current_class = group
        self.console.print(symbol, end="")

    def _print_test_line(self, description: Description, status: TestStatus, duration_ms: float) -> None:
        color = self._status_color(status)
        label = self._status_label(status)
        duration = f"[dim]({duration_ms:.1f}ms)[/dim]"
        extra = ""
        reason = self._reasons.pop(description, None)
        if status == TestStatus.SKIPPED and reason:
            extra = f"[dim]skipped ({escape(reason)})[/dim] "
        self.console.print(f"  • {escape(description.display_name)} {duration} {extra}[{color}]{label}[/{color}]")

    def _format_error(self, error: BaseException) -> Traceback | str:
        if isinstance(error, FailTest) and error.reason:
            return f"Failed: {error.reason}"
        if error.__traceback__:
            return Traceback.from_exception(
                type(error),
                error,
                error.__traceback__,
                suppress=[__import__("trellis")],
                show_locals=self.verbosity >= 2,
            )
        return f"{type(error).__name__}: {error}"

    def _build_failure_panel(self, failure: Failure) -> Panel:
        content = self._format_error(failure.exception)
        if isinstance(content, str):
            content = escape(content)
        return Panel(
            content,
            title=escape(failure.test_header),
            title_align="left",
            border_style=self._status_color(TestStatus.FAILED),
            expand=True,
            padding=(1, 1),
        )

    def test_run_finished(self, description: Description) -> None:
        if self.verbosity == 0 and self._current_class is not None:
            self.console.print()
            self._current_class = None
        if self._failures:
            self._print_failures()
        self._print_summary()

    def _print_failures(self) -> None:
        self.console.print()
        self._print_section_header("FAILURES")
        for index, failure in enumerate(self._failures):
            if index:
                self.console.print()
            self.console.print(self._build_failure_panel(failure))
        self.console.print()

    def _print_summary(self) -> None:
        parts = []
        for status in TestStatus:
            count = self._counts[status]
            if count:
                color = self._status_color(status)
                parts.append(f"[{color}]{count} {status.value}[/{color}]")
        summary = ", ".join(parts) if parts else "[dim]0 tests[/dim]"
        elapsed = (time.perf_counter() - self._run_start) * 1000 if self._run_start is not None else 0.0
        self.console.print()
        self._print_section_header("SUMMARY")
        self.console.print(f"[bold]{summary} in {elapsed:.0f}ms[/bold]", justify="center")
        self.console.print("=" * self.console.width)
