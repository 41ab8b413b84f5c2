"""Programmatic entry points for running templates."""

from __future__ import annotations

import logging

from rich.console import Console

from trellis.builder import RunnerBuilder
from trellis.config import TrellisSettings, load_settings
from trellis.errors import NoTestsRemainError
from trellis.filter import Filter
from trellis.notification import RunListener, RunNotifier
from trellis.reports.console import ConsoleListener
from trellis.result import Result
from trellis.runners.base import ParentRunner, Runner
from trellis.runners.error import ErrorReportingRunner
from trellis.runners.suite import Suite
from trellis.tracing import TestTracer, init_tracing


logger = logging.getLogger(__name__)


class Core:
    """Runs runners against one notifier and collects a ``Result`` per run.

    Examples:
        core = Core(console=Console())
        result = core.run_classes(ParserTest, LexerTest)
        assert result.was_successful()
    """

    def __init__(self, *, console: Console | None = None, settings: TrellisSettings | None = None) -> None:
        self.settings = settings or load_settings()
        self.notifier = RunNotifier()
        self.builder = RunnerBuilder(tracer=TestTracer(enabled=self.settings.tracing_enabled))
        if console is not None:
            self.add_listener(ConsoleListener(console=console, verbosity=self.settings.verbosity))

    def add_listener(self, listener: RunListener) -> None:
        self.notifier.add_listener(listener)

    def remove_listener(self, listener: RunListener) -> None:
        self.notifier.remove_listener(listener)

    def runner_for(self, *classes: type) -> Runner:
        """One runner for a single template, a ``Suite`` for several."""
        if len(classes) == 1:
            return self.builder.safe_runner_for_class(classes[0])
        return Suite(None, self.builder.runners(None, classes), name="All tests")

    def run_classes(self, *classes: type, plan_filter: Filter | None = None) -> Result:
        return self.run(self.runner_for(*classes), plan_filter=plan_filter)

    def run(self, runner: Runner, *, plan_filter: Filter | None = None) -> Result:
        """Run ``runner`` between run-started and run-finished events."""
        if plan_filter is not None:
            runner = self._filtered(runner, plan_filter)
        if self.settings.tracing_enabled:
            init_tracing(service_name=self.settings.service_name, output_path=self.settings.trace_output)

        result = Result()
        listener = result.listener()
        self.notifier.add_first_listener(listener)
        try:
            description = runner.describe()
            logger.debug("Running %s (%d tests)", description, description.test_count())
            self.notifier.fire_test_run_started(description)
            runner.run(self.notifier)
            self.notifier.fire_test_run_finished(runner.describe())
        finally:
            if listener in self.notifier.listeners:
                self.notifier.remove_listener(listener)
        return result

    @staticmethod
    def _filtered(runner: Runner, plan_filter: Filter) -> Runner:
        if not isinstance(runner, ParentRunner):
            return runner
        try:
            runner.filter(plan_filter)
        except NoTestsRemainError as e:
            return ErrorReportingRunner(runner.model.cls if runner.model else None, e)
        return runner


def run_classes(*classes: type, console: Console | None = None) -> Result:
    """Run templates with settings from the environment."""
    return Core(console=console).run_classes(*classes)


def runner_for(template: type) -> Runner:
    """The runner the default builder selects for ``template``."""
    return RunnerBuilder().safe_runner_for_class(template)
