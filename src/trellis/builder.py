"""Selection of the runner variant for a template."""

from __future__ import annotations

import inspect
import logging
import unittest
from collections.abc import Iterable

from trellis.errors import InitializationError
from trellis.markers import Marker
from trellis.model import TestClassModel
from trellis.runners.base import Runner
from trellis.runners.class_runner import ClassRunner
from trellis.runners.error import ErrorReportingRunner, IgnoredClassRunner
from trellis.runners.legacy import LegacySuiteAdapter, SuiteMethod
from trellis.tracing import TestTracer


logger = logging.getLogger(__name__)


class RunnerBuilder:
    """Builds the runner for a template.

    Selection order:
        1. ``@ignore`` on the class: ``IgnoredClassRunner``
        2. ``@run_with(R)``: ``R(template, builder)`` (or ``R(template)``)
        3. a static ``suite()`` factory: ``SuiteMethod``
        4. a ``unittest.TestCase`` subclass: ``LegacySuiteAdapter``
        5. otherwise: ``ClassRunner``

    The builder also tracks the suites being built so that a suite listing
    itself, directly or through other suites, is reported instead of recursing.
    """

    def __init__(
        self,
        *,
        use_suite_method: bool = True,
        strip_ignored: bool = False,
        tracer: TestTracer | None = None,
    ) -> None:
        self.use_suite_method = use_suite_method
        self.strip_ignored = strip_ignored
        self.tracer = tracer
        self._parents: set[type] = set()

    def runner_for_class(self, template: type) -> Runner:
        """Build the runner for ``template``; raises ``TrellisError`` on bad templates."""
        model = TestClassModel(template)

        if Marker.IGNORE in model.own_markers:
            logger.debug("Selected IgnoredClassRunner for %s", model.name)
            return IgnoredClassRunner(template)

        runner_cls = model.markers.get(Marker.RUN_WITH)
        if runner_cls is not None:
            logger.debug("Selected %s for %s", runner_cls.__name__, model.name)
            return self.build_annotated(runner_cls, template)

        if self.use_suite_method and model.suite_factory() is not None:
            logger.debug("Selected SuiteMethod for %s", model.name)
            return SuiteMethod(template)

        if model.is_unittest_case:
            logger.debug("Selected LegacySuiteAdapter for %s", model.name)
            return LegacySuiteAdapter(unittest.defaultTestLoader.loadTestsFromTestCase(template), name=template)

        logger.debug("Selected ClassRunner for %s", model.name)
        return ClassRunner(template, strip_ignored=self.strip_ignored, tracer=self.tracer)

    def build_annotated(self, runner_cls: type, template: type) -> Runner:
        """Build a runner chosen with ``@run_with``."""
        try:
            inspect.signature(runner_cls).bind(template, self)
        except TypeError:
            return runner_cls(template)
        return runner_cls(template, self)

    def safe_runner_for_class(self, template: type) -> Runner:
        """Like ``runner_for_class`` but reports a bad template as an error runner."""
        try:
            return self.runner_for_class(template)
        except Exception as e:
            logger.warning("Could not build a runner for %r: %s", template, e)
            return ErrorReportingRunner(template, e)

    def runners(self, parent: type | None, classes: Iterable[type]) -> list[Runner]:
        """Runners for the children of suite ``parent``, in order."""
        self._add_parent(parent)
        try:
            return [self.safe_runner_for_class(cls) for cls in classes]
        finally:
            self._parents.discard(parent)

    def _add_parent(self, parent: type | None) -> None:
        if parent is None:
            return
        if parent in self._parents:
            msg = f"class '{parent.__qualname__}' (possibly indirectly) contains itself as a SuiteClass"
            raise InitializationError(msg)
        self._parents.add(parent)

    @staticmethod
    def is_template(cls: type) -> bool:
        """True for classes a suite treats as children."""
        model = TestClassModel(cls)
        return bool(
            model.annotated_methods(Marker.TEST)
            or Marker.RUN_WITH in model.markers
            or model.suite_factory() is not None
            or model.is_unittest_case
        )
