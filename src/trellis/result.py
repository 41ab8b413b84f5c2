"""Aggregated outcome of a run, collected through a listener."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from trellis.description import Description
from trellis.notification import Failure, RunListener


@dataclass
class Result:
    """Counts and failures of a complete run.

    Attach ``result.listener()`` to a ``RunNotifier`` before running.
    """

    run_count: int = 0
    ignore_count: int = 0
    failures: list[Failure] = field(default_factory=list)
    assumption_failures: list[Failure] = field(default_factory=list)
    run_time_ms: float = 0

    @property
    def failure_count(self) -> int:
        """Count of failures."""
        return len(self.failures)

    @property
    def assumption_failure_count(self) -> int:
        """Count of tests stopped by a failed assumption."""
        return len(self.assumption_failures)

    def was_successful(self) -> bool:
        return self.failure_count == 0

    def listener(self) -> RunListener:
        """Listener that fills this result in."""
        return _ResultListener(self)


class _ResultListener(RunListener):
    def __init__(self, result: Result) -> None:
        self.result = result
        self._start: float | None = None

    def test_run_started(self, description: Description) -> None:
        self._start = time.perf_counter()

    def test_run_finished(self, description: Description) -> None:
        if self._start is not None:
            self.result.run_time_ms += (time.perf_counter() - self._start) * 1000
            self._start = None

    def test_finished(self, description: Description) -> None:
        self.result.run_count += 1

    def test_failure(self, failure: Failure) -> None:
        self.result.failures.append(failure)

    def test_assumption_failure(self, failure: Failure) -> None:
        self.result.assumption_failures.append(failure)

    def test_ignored(self, description: Description) -> None:
        self.result.ignore_count += 1
