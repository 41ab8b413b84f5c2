"""Adapters between ``unittest`` style suites and trellis runners.

A template with a static ``suite()`` factory builds its own aggregate the
``unittest`` way; ``SuiteMethod`` runs whatever the factory returns through a
``LegacySuiteAdapter``. ``ModernTestAdapter`` goes the other way and lets a
trellis template sit inside a ``unittest.TestSuite``::

    class NewTest:
        @test
        def sample(self): ...

        @staticmethod
        def suite():
            return ModernTestAdapter(NewTest)
"""

from __future__ import annotations

import logging
import unittest
from types import TracebackType
from typing import TYPE_CHECKING, Any

from trellis.description import Description
from trellis.errors import AdapterFailure, ConfigurationError
from trellis.model import TestClassModel
from trellis.notification import EachTestNotifier, Failure, RunListener, RunNotifier
from trellis.outcomes import AssumptionViolation, FailTest
from trellis.runners.base import Runner


if TYPE_CHECKING:
    from trellis.builder import RunnerBuilder


logger = logging.getLogger(__name__)

ExcInfo = tuple[type[BaseException], BaseException, TracebackType | None]


def describe_test(test: Any) -> Description:
    """Plan node of a ``unittest`` test, suite or ``ModernTestAdapter``."""
    if isinstance(test, ModernTestAdapter):
        return test.describe()
    if isinstance(test, unittest.TestCase):
        return Description.for_test(type(test), test._testMethodName)
    if isinstance(test, unittest.BaseTestSuite):
        children = [describe_test(child) for child in test]
        count = test.countTestCases()
        if not children:
            return Description.for_suite("TestSuite with 0 tests")
        example = next(children[0].leaves(), children[0])
        return Description.for_suite(f"TestSuite with {count} tests [example: {example}]", children)
    return Description.for_suite(str(test))


def _keep_tests(test: Any) -> None:
    """Stop ``unittest`` suites from dropping tests once they have run.

    ``TestSuite.run()`` replaces each finished test with ``None`` while the
    private ``_cleanup`` flag is set, which would leave ``describe()`` after a
    run with a different plan. Clearing that CPython ``unittest`` internal on
    every nested suite keeps the plan stable across runs.
    """
    if isinstance(test, unittest.BaseTestSuite):
        test._cleanup = False
        for child in test:
            _keep_tests(child)


def _owner(test: Any) -> Any:
    """The test case a subtest belongs to."""
    return getattr(test, "test_case", test)


class _NotifierResult(unittest.TestResult):
    """``unittest`` result that turns ``unittest`` callbacks into notifier events."""

    def __init__(self, notifier: RunNotifier) -> None:
        super().__init__()
        self.notifier = notifier

    def _window(self, test: Any) -> EachTestNotifier:
        return EachTestNotifier(self.notifier, describe_test(_owner(test)))

    def startTest(self, test: Any) -> None:  # noqa: N802
        super().startTest(test)
        self._window(test).fire_test_started()

    def stopTest(self, test: Any) -> None:  # noqa: N802
        super().stopTest(test)
        self._window(test).fire_test_finished()

    def _report(self, test: Any, error: BaseException) -> None:
        each = self._window(test)
        if isinstance(test, unittest.TestCase):
            each.report(error)
            return
        # Class and module fixture errors arrive outside any startTest/stopTest.
        each.fire_test_started()
        try:
            each.report(error)
        finally:
            each.fire_test_finished()

    def addError(self, test: Any, err: ExcInfo) -> None:  # noqa: N802
        self._report(test, err[1])

    def addFailure(self, test: Any, err: ExcInfo) -> None:  # noqa: N802
        self._report(test, err[1])

    def addSkip(self, test: Any, reason: str) -> None:  # noqa: N802
        self._report(test, AssumptionViolation(reason))

    def addUnexpectedSuccess(self, test: Any) -> None:  # noqa: N802
        self._report(test, AssertionError("unexpected success"))

    def addSubTest(self, test: Any, subtest: Any, err: ExcInfo | None) -> None:  # noqa: N802
        if err is not None:
            self._report(test, err[1])


class LegacySuiteAdapter(Runner):
    """Runs a ``unittest`` test or suite as a trellis runner."""

    def __init__(self, test: Any, *, name: str | type | None = None) -> None:
        _keep_tests(test)
        self.test = test
        self.name = name

    def describe(self) -> Description:
        description = describe_test(self.test)
        if self.name is not None and isinstance(self.test, unittest.BaseTestSuite):
            return Description.for_suite(self.name, description.children)
        return description

    def test_count(self) -> int:
        return self.test.countTestCases()

    def run(self, notifier: RunNotifier) -> None:
        self.test(_NotifierResult(notifier))


class SuiteMethod(LegacySuiteAdapter):
    """Runs the aggregate returned by a template's static ``suite()`` factory."""

    def __init__(self, template: type) -> None:
        model = TestClassModel(template)
        factory = model.suite_factory()
        if factory is None:
            msg = f"{model.name} has no static suite() method"
            raise ConfigurationError(msg)
        try:
            test = factory.invoke()
        except (Exception, FailTest, AssumptionViolation) as e:
            raise AdapterFailure(template, e) from e
        if not isinstance(test, (unittest.BaseTestSuite, unittest.TestCase, ModernTestAdapter)):
            msg = f"{model.name}.suite() must return a unittest test or suite, got {type(test).__name__}"
            raise ConfigurationError(msg)
        logger.debug("%s.suite() returned %r", model.name, test)
        super().__init__(test)


class _DescriptionCase:
    """Stand-in test case handed to ``unittest`` results for a plan node."""

    failureException = AssertionError  # noqa: N815

    def __init__(self, description: Description) -> None:
        self.description = description

    def id(self) -> str:
        return self.description.display_name

    def shortDescription(self) -> str | None:  # noqa: N802
        return None

    def __str__(self) -> str:
        return self.description.display_name


class _UnittestBridge(RunListener):
    """Replays trellis events on a plain ``unittest.TestResult``."""

    def __init__(self, result: unittest.TestResult) -> None:
        self.result = result
        self._failed: set[Description] = set()

    @staticmethod
    def _exc_info(error: BaseException) -> ExcInfo:
        return (type(error), error, error.__traceback__)

    def test_started(self, description: Description) -> None:
        self.result.startTest(_DescriptionCase(description))

    def test_failure(self, failure: Failure) -> None:
        self._failed.add(failure.description)
        case = _DescriptionCase(failure.description)
        if isinstance(failure.exception, (AssertionError, FailTest)):
            self.result.addFailure(case, self._exc_info(failure.exception))
        else:
            self.result.addError(case, self._exc_info(failure.exception))

    def test_assumption_failure(self, failure: Failure) -> None:
        self._failed.add(failure.description)
        self.result.addSkip(_DescriptionCase(failure.description), failure.message)

    def test_ignored(self, description: Description) -> None:
        case = _DescriptionCase(description)
        self.result.startTest(case)
        self.result.addSkip(case, "ignored")
        self.result.stopTest(case)

    def test_finished(self, description: Description) -> None:
        case = _DescriptionCase(description)
        if description in self._failed:
            self._failed.discard(description)
        else:
            self.result.addSuccess(case)
        self.result.stopTest(case)


class ModernTestAdapter:
    """``unittest`` compatible test object backed by a trellis runner.

    The runner is built without the ``suite()`` factory and with ignored tests
    stripped, since ``unittest`` has no notion of an ignored test.
    """

    def __init__(self, template: type, builder: RunnerBuilder | None = None) -> None:
        if builder is None:
            from trellis.builder import RunnerBuilder  # noqa: PLC0415

            builder = RunnerBuilder(use_suite_method=False, strip_ignored=True)
        self.template = template
        self.runner = builder.safe_runner_for_class(template)

    def describe(self) -> Description:
        return self.runner.describe()

    def countTestCases(self) -> int:  # noqa: N802
        return self.runner.test_count()

    def run(self, result: unittest.TestResult) -> None:
        if isinstance(result, _NotifierResult):
            self.runner.run(result.notifier)
            return
        notifier = RunNotifier()
        notifier.add_listener(_UnittestBridge(result))
        self.runner.run(notifier)

    def __call__(self, result: unittest.TestResult) -> None:
        self.run(result)

    def debug(self) -> None:
        self.run(unittest.TestResult())

    def __str__(self) -> str:
        return self.template.__qualname__

    def __repr__(self) -> str:
        return f"ModernTestAdapter({self.template.__qualname__})"
