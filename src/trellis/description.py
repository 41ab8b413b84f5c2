"""Plan nodes shared by pre-run description and post-run attribution."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import total_ordering
from typing import ClassVar


def qualified_name(cls: type) -> str:
    """Module-qualified name used as the class part of test identities."""
    return f"{cls.__module__}.{cls.__qualname__}"


@total_ordering
@dataclass(frozen=True, eq=False)
class Description:
    """Immutable node of a test plan.

    Leaf tests carry a ``(class_name, method_name)`` identity pair; aggregate
    nodes carry only a display name. Two nodes are equal when both carry an
    identity pair and the pairs match, or when neither does and the display
    names match. Position in the tree plays no part in equality.

    Attributes:
    ----------
    display_name : str
        Human readable label, e.g. ``"test[0](pkg.mod.FibonacciTest)"``.
    class_name : str | None
        Qualified template name for leaf tests.
    method_name : str | None
        Reported method name for leaf tests, e.g. ``"test[0]"``.
    children : tuple[Description, ...]
        Child nodes in plan order.
    """

    TEST_MECHANISM: ClassVar[Description]

    display_name: str
    class_name: str | None = None
    method_name: str | None = None
    children: tuple[Description, ...] = field(default_factory=tuple)

    @classmethod
    def for_test(cls, class_name: str | type, method_name: str) -> Description:
        """Create a leaf node for one test method."""
        if isinstance(class_name, type):
            class_name = qualified_name(class_name)
        return cls(
            display_name=f"{method_name}({class_name})",
            class_name=class_name,
            method_name=method_name,
        )

    @classmethod
    def for_suite(cls, name: str | type, children: Iterable[Description] = ()) -> Description:
        """Create an aggregate node."""
        if isinstance(name, type):
            name = qualified_name(name)
        return cls(display_name=name, children=tuple(children))

    @property
    def has_identity(self) -> bool:
        return self.class_name is not None and self.method_name is not None

    @property
    def is_test(self) -> bool:
        """True for leaves."""
        return not self.children

    @property
    def is_suite(self) -> bool:
        return not self.is_test

    def test_count(self) -> int:
        """Number of leaves under this node."""
        if self.is_test:
            return 1
        return sum(child.test_count() for child in self.children)

    def leaves(self) -> Iterator[Description]:
        """Yield leaf nodes depth-first in plan order."""
        if self.is_test:
            yield self
            return
        for child in self.children:
            yield from child.leaves()

    def walk(self) -> Iterator[Description]:
        """Yield every node depth-first, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def same_structure(self, other: Description) -> bool:
        """Compare whole trees: equal nodes with pairwise equal children."""
        if self != other or len(self.children) != len(other.children):
            return False
        return all(mine.same_structure(theirs) for mine, theirs in zip(self.children, other.children))

    def _key(self) -> tuple[str, ...]:
        if self.has_identity:
            return ("test", self.class_name or "", self.method_name or "")
        return ("node", self.display_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Description):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Description):
            return NotImplemented
        return self.display_name < other.display_name

    def __str__(self) -> str:
        return self.display_name


Description.TEST_MECHANISM = Description.for_suite("Test mechanism")
