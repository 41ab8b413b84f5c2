"""Tests for plan filtering."""

import pytest

from trellis import Core, Parameterized, parameters, run_with, test
from trellis.builder import RunnerBuilder
from trellis.description import Description
from trellis.errors import NoTestsRemainError
from trellis.filter import Filter
from trellis.runners import ClassRunner


def make_template():
    class Template:
        @test
        def first(self):
            pass

        @test
        def second(self):
            pass

    return Template


class TestFilterPredicates:
    """Tests for filter decisions on descriptions."""

    def test_matching_leaf(self):
        leaf = Description.for_test("C", "a")
        f = Filter.matching(leaf)
        assert f.should_run(leaf)
        assert not f.should_run(Description.for_test("C", "b"))
        assert f.should_run(Description.for_suite("C", [leaf]))
        assert f.describe() == "Method a(C)"

    def test_intersection(self):
        a = Filter.where(lambda d: d.method_name.startswith("a"), "starts with a")
        short = Filter.where(lambda d: len(d.method_name) < 3, "short")
        both = a.intersect(short)

        assert both.should_run(Description.for_test("C", "ab"))
        assert not both.should_run(Description.for_test("C", "abc"))
        assert not both.should_run(Description.for_test("C", "b"))
        assert str(both) == "starts with a and short"


class TestRunnerFiltering:
    """Tests for filtering runner trees."""

    def test_class_runner_keeps_matching_methods(self):
        runner = ClassRunner(make_template())
        target = runner.describe().children[1]
        runner.filter(Filter.matching(target))

        assert [child.method_name for child in runner.describe().children] == ["second"]
        assert runner.test_count() == 1

    def test_nothing_left_raises(self):
        runner = ClassRunner(make_template())
        with pytest.raises(NoTestsRemainError, match="No tests remain"):
            runner.filter(Filter.where(lambda d: False, "nothing"))

    def test_parameterized_drops_empty_children(self):
        @run_with(Parameterized)
        class Template:
            @parameters
            @staticmethod
            def data():
                return {"x": (1,), "y": (2,)}

            def __init__(self, value):
                self.value = value

            @test
            def check(self):
                pass

        runner = RunnerBuilder().runner_for_class(Template)
        runner.filter(Filter.where(lambda d: d.method_name == "check[y]", "only y"))

        plan = runner.describe()
        assert [child.display_name for child in plan.children] == ["[y]"]
        assert runner.test_count() == 1

    def test_core_runs_filtered_plan(self):
        template = make_template()
        result = Core().run_classes(template, plan_filter=Filter.where(lambda d: d.method_name == "first"))
        assert result.run_count == 1

    def test_core_reports_empty_filter(self):
        result = Core().run_classes(make_template(), plan_filter=Filter.where(lambda d: False, "none"))
        assert result.failure_count == 1
        assert isinstance(result.failures[0].exception, NoTestsRemainError)
