"""Plan filters applied before a run."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from trellis.description import Description


class Filter(ABC):
    """Decides which plan nodes take part in a run."""

    @abstractmethod
    def should_run(self, description: Description) -> bool:
        """True when ``description`` (or, for aggregates, any of its leaves) should run."""

    @abstractmethod
    def describe(self) -> str:
        """Human readable explanation of the filter."""

    @classmethod
    def matching(cls, description: Description) -> Filter:
        """Keep a single test, or every test under a given aggregate."""
        return _MatchingFilter(description)

    @classmethod
    def where(cls, predicate: Callable[[Description], bool], explanation: str = "custom predicate") -> Filter:
        """Keep leaves accepted by ``predicate``."""
        return _PredicateFilter(predicate, explanation)

    def intersect(self, other: Filter) -> Filter:
        """Keep only what both filters keep."""
        return _IntersectionFilter(self, other)

    def __str__(self) -> str:
        return self.describe()


class _LeafFilter(Filter):
    def should_run(self, description: Description) -> bool:
        if description.is_test:
            return self.accepts(description)
        return any(self.should_run(child) for child in description.children)

    @abstractmethod
    def accepts(self, leaf: Description) -> bool: ...


class _MatchingFilter(_LeafFilter):
    def __init__(self, target: Description) -> None:
        self.target = target
        self._leaves = set(target.leaves())

    def accepts(self, leaf: Description) -> bool:
        return leaf in self._leaves

    def describe(self) -> str:
        return f"Method {self.target.display_name}"


class _PredicateFilter(_LeafFilter):
    def __init__(self, predicate: Callable[[Description], bool], explanation: str) -> None:
        self.predicate = predicate
        self.explanation = explanation

    def accepts(self, leaf: Description) -> bool:
        return bool(self.predicate(leaf))

    def describe(self) -> str:
        return self.explanation


class _IntersectionFilter(Filter):
    def __init__(self, first: Filter, second: Filter) -> None:
        self.first = first
        self.second = second

    def should_run(self, description: Description) -> bool:
        if description.is_test:
            return self.first.should_run(description) and self.second.should_run(description)
        return any(self.should_run(child) for child in description.children)

    def describe(self) -> str:
        return f"{self.first.describe()} and {self.second.describe()}"
