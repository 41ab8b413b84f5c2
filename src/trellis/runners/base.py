"""Runner protocol and the composite base every tree-shaped runner builds on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

from trellis.description import Description
from trellis.errors import InitializationError, NoTestsRemainError
from trellis.filter import Filter
from trellis.model import TestClassModel
from trellis.notification import RunNotifier


C = TypeVar("C")


class Runner(ABC):
    """Unit of execution that can describe itself before it runs.

    ``describe()`` must be side-effect free and return an equal tree every
    time; ``run()`` reports against that same tree.
    """

    @abstractmethod
    def describe(self) -> Description:
        """Plan of this runner."""

    @abstractmethod
    def run(self, notifier: RunNotifier) -> None:
        """Execute, reporting every leaf to ``notifier`` in plan order."""

    def test_count(self) -> int:
        return self.describe().test_count()


class ParentRunner(Runner, Generic[C]):
    """Runner made of an ordered list of children of type ``C``.

    Subclasses provide the children and say how to describe and run one child;
    description, traversal, counting and filtering are shared. Subclasses must
    set any state their validation needs before calling ``__init__``.
    """

    def __init__(self, template: type | None) -> None:
        self.model = TestClassModel(template) if template is not None else None
        self._filtered: list[C] | None = None
        errors: list[BaseException] = []
        self.collect_initialization_errors(errors)
        if errors:
            raise InitializationError(errors)

    def collect_initialization_errors(self, errors: list[BaseException]) -> None:
        """Append a validation error per problem found in the template."""

    @abstractmethod
    def get_children(self) -> Sequence[C]:
        """Children in plan order."""

    @abstractmethod
    def describe_child(self, child: C) -> Description: ...

    @abstractmethod
    def run_child(self, child: C, notifier: RunNotifier) -> None:
        """Run one child; must not let test failures escape."""

    def get_name(self) -> str:
        if self.model is None:
            return "null"
        return self.model.name

    @property
    def children(self) -> list[C]:
        if self._filtered is None:
            self._filtered = list(self.get_children())
        return self._filtered

    def describe(self) -> Description:
        return Description.for_suite(self.get_name(), [self.describe_child(child) for child in self.children])

    def run(self, notifier: RunNotifier) -> None:
        self.run_children(notifier)

    def run_children(self, notifier: RunNotifier) -> None:
        for child in self.children:
            self.run_child(child, notifier)

    def filter(self, plan_filter: Filter) -> None:
        """Drop children the filter rejects; nested runners are filtered too.

        Raises ``NoTestsRemainError`` when nothing is left.
        """
        kept: list[C] = []
        for child in self.children:
            if not plan_filter.should_run(self.describe_child(child)):
                continue
            if isinstance(child, Runner) and hasattr(child, "filter"):
                try:
                    child.filter(plan_filter)
                except NoTestsRemainError:
                    continue
            kept.append(child)
        self._filtered = kept
        if not kept:
            msg = f"No tests remain in {self.get_name()} after filter: {plan_filter.describe()}"
            raise NoTestsRemainError(msg)
