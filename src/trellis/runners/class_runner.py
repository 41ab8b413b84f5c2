"""Runner for a plain template: one leaf per ``@test`` method."""

from __future__ import annotations

import logging
import time
from typing import Any

from trellis.config import load_settings
from trellis.description import Description
from trellis.errors import ConfigurationError
from trellis.markers import Marker
from trellis.model import TestMethod
from trellis.notification import EachTestNotifier, RunNotifier
from trellis.outcomes import AssumptionViolation, FailTest
from trellis.runners.base import ParentRunner
from trellis.tracing import TestTracer


logger = logging.getLogger(__name__)


class ClassRunner(ParentRunner[TestMethod]):
    """Runs every ``@test`` method of a template on a fresh instance.

    The instance is built lazily inside each test's notification window, so a
    constructor failure is reported as a failure of that test.

    Examples:
        runner = ClassRunner(CalculatorTest)
        runner.describe()   # plan, nothing executed
        runner.run(notifier)
    """

    def __init__(
        self,
        template: type,
        *,
        strip_ignored: bool = False,
        tracer: TestTracer | None = None,
    ) -> None:
        self.strip_ignored = strip_ignored
        self.tracer = tracer or TestTracer(enabled=load_settings().tracing_enabled)
        self._descriptions: dict[str, Description] = {}
        super().__init__(template)

    def collect_initialization_errors(self, errors: list[BaseException]) -> None:
        self.validate_constructor(errors)
        self.validate_instance_methods(errors)

    def validate_constructor(self, errors: list[BaseException]) -> None:
        self.validate_only_one_constructor(errors)
        if not errors:
            self.validate_zero_arg_constructor(errors)

    def validate_only_one_constructor(self, errors: list[BaseException]) -> None:
        try:
            self.model.only_constructor()
        except ConfigurationError as e:
            errors.append(e)

    def validate_zero_arg_constructor(self, errors: list[BaseException]) -> None:
        if not self.model.only_constructor().accepts(0):
            msg = f"Test class {self.model.simple_name} should have exactly one public zero-argument constructor"
            errors.append(ConfigurationError(msg))

    def validate_instance_methods(self, errors: list[BaseException]) -> None:
        for method in self.model.annotated_methods(Marker.TEST):
            method.validate_public_void_no_arg(is_static=False, errors=errors)
        if not self.compute_test_methods():
            errors.append(ConfigurationError("No runnable methods"))

    def compute_test_methods(self) -> list[TestMethod]:
        methods = self.model.annotated_methods(Marker.TEST)
        if self.strip_ignored:
            methods = [method for method in methods if not method.is_ignored]
        return methods

    def get_children(self) -> list[TestMethod]:
        return self.compute_test_methods()

    def test_name(self, method: TestMethod) -> str:
        """Reported name of a test method."""
        return method.name

    def describe_child(self, child: TestMethod) -> Description:
        description = self._descriptions.get(child.name)
        if description is None:
            description = Description.for_test(self.model.name, self.test_name(child))
            self._descriptions[child.name] = description
        return description

    def create_test(self) -> Any:
        """Build the instance a single test runs against."""
        return self.model.only_constructor().new_instance(())

    def run_child(self, child: TestMethod, notifier: RunNotifier) -> None:
        each = EachTestNotifier(notifier, self.describe_child(child))
        if child.is_ignored:
            logger.debug("Ignoring %s (%s)", each.description, child.ignore_reason or "no reason given")
            each.fire_test_ignored()
            return
        each.fire_test_started()
        try:
            self.method_block(child, each)
        finally:
            each.fire_test_finished()

    def method_block(self, method: TestMethod, each: EachTestNotifier) -> None:
        """Instantiate, invoke and report one test inside its span."""
        with self.tracer.span(each.description) as span:
            start = time.perf_counter()
            error: BaseException | None = None
            try:
                test = self.create_test()
                method.invoke(test)
            except (Exception, FailTest, AssumptionViolation) as e:
                logger.debug("%s raised %s", each.description, type(e).__name__)
                error = e
                each.report(e)
            self.tracer.record(span, error, (time.perf_counter() - start) * 1000)
