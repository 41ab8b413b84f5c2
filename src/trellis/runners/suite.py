"""Generic ordered composite of runners."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from trellis.description import Description
from trellis.markers import Marker
from trellis.model import TestClassModel
from trellis.notification import EachTestNotifier, RunNotifier
from trellis.runners.base import ParentRunner, Runner


if TYPE_CHECKING:
    from trellis.builder import RunnerBuilder


logger = logging.getLogger(__name__)


class Suite(ParentRunner[Runner]):
    """Runs child runners in order, describing itself as their aggregate.

    Children are given explicitly, or, when the suite is selected with
    ``@run_with(Suite)``, built from the container's ``@suite_classes`` list
    or else from the qualifying classes nested in the container.

    Examples:
        @run_with(Suite)
        @suite_classes(ParserTest, LexerTest)
        class AllTests: ...

        Suite(None, [ClassRunner(ParserTest), ClassRunner(LexerTest)], name="all")
    """

    def __init__(
        self,
        template: type | None,
        runners: RunnerBuilder | Sequence[Runner] = (),
        *,
        name: str | None = None,
    ) -> None:
        self._name = name
        if isinstance(runners, Sequence):
            self._runners = list(runners)
        else:
            self._runners = runners.runners(template, self.child_classes(template, runners))
        super().__init__(template)

    @staticmethod
    def child_classes(template: type | None, builder: RunnerBuilder) -> list[type]:
        """Templates a container declares as its children."""
        if template is None:
            return []
        model = TestClassModel(template)
        declared = model.own_markers.get(Marker.SUITE_CLASSES)
        if declared is not None:
            return list(declared)
        return [nested for nested in model.nested_classes() if builder.is_template(nested)]

    def get_name(self) -> str:
        if self._name is not None:
            return self._name
        return super().get_name()

    def get_children(self) -> list[Runner]:
        return self._runners

    def describe_child(self, child: Runner) -> Description:
        return child.describe()

    def run_child(self, child: Runner, notifier: RunNotifier) -> None:
        try:
            child.run(notifier)
        except Exception as e:
            description = child.describe()
            logger.warning("Runner for %s raised out of run(): %s", description, e)
            each = EachTestNotifier(notifier, description)
            each.fire_test_started()
            try:
                each.add_failure(e)
            finally:
                each.fire_test_finished()

    def test_count(self) -> int:
        return sum(child.test_count() for child in self.children)
