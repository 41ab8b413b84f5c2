"""Runners standing in for templates that cannot run normally."""

from __future__ import annotations

from trellis.description import Description, qualified_name
from trellis.errors import AdapterFailure, InitializationError
from trellis.notification import EachTestNotifier, RunNotifier
from trellis.runners.base import Runner


INITIALIZATION_ERROR = "initializationError"


class ErrorReportingRunner(Runner):
    """Reports why a template could not be built.

    Every cause becomes one ``initializationError`` leaf with exactly one
    failure; nothing of the template itself is executed.
    """

    def __init__(self, template: type | None, error: BaseException) -> None:
        self.template = template
        self.causes = self._get_causes(error)

    @staticmethod
    def _get_causes(error: BaseException) -> list[BaseException]:
        if isinstance(error, InitializationError):
            return list(error.causes)
        if isinstance(error, AdapterFailure):
            return [error.cause]
        return [error]

    def _class_name(self) -> str:
        if self.template is None:
            return "null"
        if not isinstance(self.template, type):
            return repr(self.template)
        return qualified_name(self.template)

    def _describe_cause(self) -> Description:
        return Description.for_test(self._class_name(), INITIALIZATION_ERROR)

    def describe(self) -> Description:
        return Description.for_suite(self._class_name(), [self._describe_cause() for _ in self.causes])

    def run(self, notifier: RunNotifier) -> None:
        for cause in self.causes:
            each = EachTestNotifier(notifier, self._describe_cause())
            each.fire_test_started()
            try:
                each.add_failure(cause)
            finally:
                each.fire_test_finished()


class IgnoredClassRunner(Runner):
    """A template marked ``@ignore`` as a whole: one ignored node, nothing runs."""

    def __init__(self, template: type) -> None:
        self.template = template

    def describe(self) -> Description:
        return Description.for_suite(self.template)

    def run(self, notifier: RunNotifier) -> None:
        notifier.fire_test_ignored(self.describe())
