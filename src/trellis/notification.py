"""Run notifications: listeners, the notifier that fans events out, failures."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from trellis.description import Description
from trellis.outcomes import AssumptionViolation


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Failure:
    """A failed test together with the exception that failed it."""

    description: Description
    exception: BaseException

    @property
    def test_header(self) -> str:
        """Display name of the failing node, e.g. ``"test[1](pkg.FibonacciTest)"``."""
        return self.description.display_name

    @property
    def message(self) -> str:
        return str(self.exception)

    @property
    def trace(self) -> str:
        """Formatted traceback of the exception."""
        exc = self.exception
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "test_header": self.test_header,
            "class_name": self.description.class_name,
            "method_name": self.description.method_name,
            "exception_type": type(self.exception).__name__,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.test_header}: {self.message}"


class RunListener:
    """Receives run events. Override the hooks you care about."""

    def test_run_started(self, description: Description) -> None:
        """Called before any test of the run has started."""

    def test_run_finished(self, description: Description) -> None:
        """Called after every test of the run has finished."""

    def test_started(self, description: Description) -> None:
        """Called when a leaf test is about to run."""

    def test_failure(self, failure: Failure) -> None:
        """Called when a test fails."""

    def test_assumption_failure(self, failure: Failure) -> None:
        """Called when a test stops because an assumption does not hold."""

    def test_ignored(self, description: Description) -> None:
        """Called instead of started/finished for an ignored test."""

    def test_finished(self, description: Description) -> None:
        """Called when a leaf test is done, whatever its outcome."""


class RunNotifier:
    """Fans run events out to the registered listeners in registration order.

    A listener that raises is removed, and the error is reported to the
    remaining listeners as a failure of ``Description.TEST_MECHANISM``.
    """

    def __init__(self) -> None:
        self._listeners: list[RunListener] = []

    @property
    def listeners(self) -> tuple[RunListener, ...]:
        return tuple(self._listeners)

    def add_listener(self, listener: RunListener) -> None:
        self._listeners.append(listener)

    def add_first_listener(self, listener: RunListener) -> None:
        """Register a listener that must see every event before the others."""
        self._listeners.insert(0, listener)

    def remove_listener(self, listener: RunListener) -> None:
        self._listeners.remove(listener)

    def _fire(self, deliver: Callable[[RunListener], None]) -> None:
        failures: list[Failure] = []
        for listener in list(self._listeners):
            try:
                deliver(listener)
            except Exception as e:
                logger.warning("Removing listener %r after it raised: %s", listener, e)
                self._listeners.remove(listener)
                failures.append(Failure(Description.TEST_MECHANISM, e))
        for failure in failures:
            self.fire_test_failure(failure)

    def fire_test_run_started(self, description: Description) -> None:
        self._fire(lambda listener: listener.test_run_started(description))

    def fire_test_run_finished(self, description: Description) -> None:
        self._fire(lambda listener: listener.test_run_finished(description))

    def fire_test_started(self, description: Description) -> None:
        self._fire(lambda listener: listener.test_started(description))

    def fire_test_failure(self, failure: Failure) -> None:
        self._fire(lambda listener: listener.test_failure(failure))

    def fire_test_assumption_failed(self, failure: Failure) -> None:
        self._fire(lambda listener: listener.test_assumption_failure(failure))

    def fire_test_ignored(self, description: Description) -> None:
        self._fire(lambda listener: listener.test_ignored(description))

    def fire_test_finished(self, description: Description) -> None:
        self._fire(lambda listener: listener.test_finished(description))


class EachTestNotifier:
    """Notification window of a single plan node."""

    def __init__(self, notifier: RunNotifier, description: Description) -> None:
        self.notifier = notifier
        self.description = description

    def fire_test_started(self) -> None:
        self.notifier.fire_test_started(self.description)

    def fire_test_finished(self) -> None:
        self.notifier.fire_test_finished(self.description)

    def fire_test_ignored(self) -> None:
        self.notifier.fire_test_ignored(self.description)

    def add_failure(self, error: BaseException) -> None:
        """Report ``error``; exception groups are reported one failure per member."""
        if isinstance(error, BaseExceptionGroup):
            for member in error.exceptions:
                self.add_failure(member)
            return
        self.notifier.fire_test_failure(Failure(self.description, error))

    def add_failed_assumption(self, error: AssumptionViolation) -> None:
        self.notifier.fire_test_assumption_failed(Failure(self.description, error))

    def report(self, error: BaseException) -> None:
        """Route an exception raised by test code to the matching event."""
        if isinstance(error, AssumptionViolation):
            self.add_failed_assumption(error)
        else:
            self.add_failure(error)
