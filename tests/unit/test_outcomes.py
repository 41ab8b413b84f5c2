"""Tests for imperative outcomes (fail, assume, skip)."""

import pytest

from trellis import assume, fail, run_classes, skip, test
from trellis.outcomes import AssumptionViolation, FailTest


class TestImperativeFail:
    def test_fail_marks_test_as_failed(self):
        class Template:
            @test
            def check(self):
                fail("not implemented")

        result = run_classes(Template)
        assert result.failure_count == 1
        assert isinstance(result.failures[0].exception, FailTest)
        assert result.failures[0].message == "not implemented"

    def test_fail_not_swallowed_by_except_exception(self):
        class Template:
            @test
            def check(self):
                try:
                    fail("escapes")
                except Exception:
                    pass

        result = run_classes(Template)
        assert result.failure_count == 1


class TestImperativeSkip:
    def test_skip_is_assumption_failure(self):
        class Template:
            @test
            def check(self):
                skip("missing dependency")

        result = run_classes(Template)
        assert result.run_count == 1
        assert result.failure_count == 0
        assert result.assumption_failure_count == 1
        assert "missing dependency" in result.assumption_failures[0].message

    def test_skip_without_reason(self):
        with pytest.raises(AssumptionViolation) as exc_info:
            skip()
        assert exc_info.value.reason == ""


class TestAssume:
    @pytest.mark.parametrize(("condition", "expected"), [(True, 0), (False, 1)])
    def test_assume(self, condition, expected):
        reached = []

        class Template:
            @test
            def check(self):
                assume(condition, "needs network")
                reached.append(True)

        result = run_classes(Template)
        assert result.assumption_failure_count == expected
        assert result.failure_count == 0
        assert reached == ([True] if condition else [])

    def test_assume_default_reason(self):
        with pytest.raises(AssumptionViolation, match="assumption failed"):
            assume(0)
