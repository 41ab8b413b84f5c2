"""Runner expanding a template into one child per parameter set.

For example, to test a Fibonacci function, write::

    @run_with(Parameterized)
    class FibonacciTest:
        @parameters
        @staticmethod
        def data():
            return [(0, 0), (1, 1), (2, 1), (3, 2), (4, 3), (5, 5), (6, 8)]

        def __init__(self, value, expected):
            self.value = value
            self.expected = expected

        @test
        def test(self):
            assert fib(self.value) == self.expected

Each child is named after its set (``[0]``, ``[1]``, ...) and each test after
the method and the set (``test[0]``, ``test[1]``, ...). Returning a mapping
from ``data()`` names the sets after its keys instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from trellis.config import load_settings
from trellis.errors import ConfigurationError, InitializationError
from trellis.model import TestClassModel, TestMethod
from trellis.parameters import ParameterSet, resolve_parameter_sets
from trellis.runners.class_runner import ClassRunner
from trellis.runners.suite import Suite
from trellis.tracing import TestTracer


if TYPE_CHECKING:
    from trellis.builder import RunnerBuilder


logger = logging.getLogger(__name__)


class ClassRunnerForParameters(ClassRunner):
    """Class runner bound to one parameter set."""

    def __init__(
        self,
        template: type,
        parameter_set: ParameterSet,
        *,
        strip_ignored: bool = False,
        tracer: TestTracer | None = None,
    ) -> None:
        self.parameter_set = parameter_set
        super().__init__(template, strip_ignored=strip_ignored, tracer=tracer)

    def create_test(self) -> Any:
        return self.model.only_constructor().new_instance(self.parameter_set.values)

    def get_name(self) -> str:
        return f"[{self.parameter_set.name}]"

    def test_name(self, method: TestMethod) -> str:
        return f"{method.name}[{self.parameter_set.name}]"

    def validate_constructor(self, errors: list[BaseException]) -> None:
        # Arity is checked per test at instantiation time.
        self.validate_only_one_constructor(errors)


class Parameterized(Suite):
    """Suite of one ``ClassRunnerForParameters`` per resolved parameter set.

    Parameter sets are resolved once, here, and reused for every describe and
    run of this runner.
    """

    def __init__(self, template: type, builder: RunnerBuilder | None = None) -> None:
        model = TestClassModel(template)
        try:
            model.only_constructor()
        except ConfigurationError as e:
            raise InitializationError(e) from e

        self.parameter_sets = resolve_parameter_sets(model)
        strip_ignored = builder.strip_ignored if builder is not None else False
        tracer = builder.tracer if builder is not None else None
        tracer = tracer or TestTracer(enabled=load_settings().tracing_enabled)
        runners = [
            ClassRunnerForParameters(template, parameter_set, strip_ignored=strip_ignored, tracer=tracer)
            for parameter_set in self.parameter_sets
        ]
        logger.debug("Expanded %s into %d runners", model.name, len(runners))
        super().__init__(template, runners)
