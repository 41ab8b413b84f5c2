"""Tests for trellis.notification and trellis.result modules."""

import pytest

from trellis.description import Description
from trellis.notification import EachTestNotifier, Failure, RunListener, RunNotifier
from trellis.outcomes import AssumptionViolation
from trellis.result import Result


LEAF = Description.for_test("pkg.Sample", "check")


class ExplodingListener(RunListener):
    def test_started(self, description):
        raise RuntimeError("listener broke")


class TestRunNotifier:
    """Tests for event fan-out."""

    def test_listeners_called_in_registration_order(self):
        calls = []

        class Named(RunListener):
            def __init__(self, name):
                self.name = name

            def test_started(self, description):
                calls.append(self.name)

        notifier = RunNotifier()
        notifier.add_listener(Named("second"))
        notifier.add_first_listener(Named("first"))
        notifier.fire_test_started(LEAF)

        assert calls == ["first", "second"]

    def test_raising_listener_removed_and_reported(self, notifier, recorder):
        exploding = ExplodingListener()
        notifier.add_first_listener(exploding)

        notifier.fire_test_started(LEAF)
        notifier.fire_test_started(LEAF)

        assert exploding not in notifier.listeners
        assert recorder.events == [
            ("started", LEAF.display_name),
            ("failure", "Test mechanism"),
            ("started", LEAF.display_name),
        ]
        assert recorder.failures[0].description == Description.TEST_MECHANISM
        assert "listener broke" in recorder.failures[0].message

    def test_remove_listener(self, notifier, recorder):
        notifier.remove_listener(recorder)
        notifier.fire_test_finished(LEAF)
        assert recorder.events == []


class TestEachTestNotifier:
    """Tests for the per-test notification window."""

    def test_report_routes_assumptions(self, notifier, recorder):
        each = EachTestNotifier(notifier, LEAF)
        each.report(AssumptionViolation("no network"))
        each.report(ValueError("boom"))

        assert [kind for kind, _ in recorder.events] == ["assumption_failure", "failure"]

    def test_exception_group_reported_per_member(self, notifier, recorder):
        each = EachTestNotifier(notifier, LEAF)
        each.add_failure(ExceptionGroup("many", [ValueError("a"), KeyError("b")]))

        assert [f.message for f in recorder.failures] == ["a", "'b'"]


class TestFailure:
    """Tests for Failure."""

    def test_header_and_message(self):
        try:
            raise AssertionError("expected 1")
        except AssertionError as e:
            failure = Failure(LEAF, e)

        assert failure.test_header == "check(pkg.Sample)"
        assert failure.message == "expected 1"
        assert "AssertionError: expected 1" in failure.trace
        assert str(failure) == "check(pkg.Sample): expected 1"
        assert failure.to_dict()["exception_type"] == "AssertionError"


class TestResult:
    """Tests for Result and its listener."""

    def test_counts_events(self):
        result = Result()
        notifier = RunNotifier()
        notifier.add_listener(result.listener())
        other = Description.for_test("pkg.Sample", "other")

        notifier.fire_test_run_started(LEAF)
        notifier.fire_test_started(LEAF)
        notifier.fire_test_failure(Failure(LEAF, AssertionError()))
        notifier.fire_test_finished(LEAF)
        notifier.fire_test_started(other)
        notifier.fire_test_assumption_failed(Failure(other, AssumptionViolation("x")))
        notifier.fire_test_finished(other)
        notifier.fire_test_ignored(Description.for_test("pkg.Sample", "ignored"))
        notifier.fire_test_run_finished(LEAF)

        assert result.run_count == 2
        assert result.failure_count == 1
        assert result.assumption_failure_count == 1
        assert result.ignore_count == 1
        assert result.run_time_ms >= 0
        assert not result.was_successful()

    @pytest.mark.parametrize("failures", [0, 1])
    def test_was_successful_depends_on_failures(self, failures):
        result = Result()
        result.failures.extend(Failure(LEAF, AssertionError()) for _ in range(failures))
        assert result.was_successful() is (failures == 0)
