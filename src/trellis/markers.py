"""Declarative markers for test templates.

Markers only record metadata on the decorated object; ``TestClassModel``
reads them back once per template.

Examples:
--------
>>> class FibonacciTest:
...     @parameters
...     @staticmethod
...     def data():
...         return [(0, 0), (1, 1), (2, 1)]
...
...     def __init__(self, value, expected):
...         self.value, self.expected = value, expected
...
...     @test
...     def computes(self):
...         assert fib(self.value) == self.expected
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar


T = TypeVar("T")

MARKERS_ATTR = "__trellis_markers__"


class Marker(Enum):
    """Marker kinds."""

    TEST = "test"
    IGNORE = "ignore"
    PARAMETERS = "parameters"
    CONSTRUCTOR = "constructor"
    RUN_WITH = "run_with"
    SUITE_CLASSES = "suite_classes"


def _unwrap(target: Any) -> Any:
    if isinstance(target, (staticmethod, classmethod)):
        return target.__func__
    return target


def _mark(target: T, marker: Marker, value: Any = True) -> T:
    holder = _unwrap(target)
    # A class starts from its own markers only; bases are merged on read.
    current = own_markers(holder) if isinstance(holder, type) else getattr(holder, MARKERS_ATTR, {})
    markers = dict(current)
    markers[marker] = value
    setattr(holder, MARKERS_ATTR, markers)
    return target


def get_markers(target: Any) -> dict[Marker, Any]:
    """Markers of a function, static/class method or class (inherited for classes)."""
    holder = _unwrap(target)
    if isinstance(holder, type):
        markers: dict[Marker, Any] = {}
        for klass in reversed(holder.__mro__):
            markers.update(own_markers(klass))
        return markers
    return getattr(holder, MARKERS_ATTR, {})


def own_markers(cls: type) -> dict[Marker, Any]:
    """Markers declared on ``cls`` itself, ignoring its bases."""
    return vars(cls).get(MARKERS_ATTR, {})


def test(fn: T) -> T:
    """Mark a method as a test."""
    return _mark(fn, Marker.TEST)


test.__test__ = False  # Prevent pytest from collecting the marker itself


def ignore(reason: str | T | None = None) -> Any:
    """Mark a test method or a whole template as ignored.

    Usable bare (``@ignore``) or with a reason (``@ignore("flaky on CI")``).
    """
    if reason is not None and not isinstance(reason, str):
        return _mark(reason, Marker.IGNORE, "")

    def decorator(target: T) -> T:
        return _mark(target, Marker.IGNORE, reason or "")

    return decorator


def parameters(fn: T) -> T:
    """Mark the static or class method that provides parameter sets."""
    return _mark(fn, Marker.PARAMETERS)


def constructor(fn: T) -> T:
    """Mark a static or class method as the template's constructor."""
    return _mark(fn, Marker.CONSTRUCTOR)


def run_with(runner_cls: type) -> Callable[[type], type]:
    """Select the runner class used for a template.

    The runner is built as ``runner_cls(template, builder)``.
    """

    def decorator(cls: type) -> type:
        return _mark(cls, Marker.RUN_WITH, runner_cls)

    return decorator


def suite_classes(*classes: type) -> Callable[[type], type]:
    """List the child templates of a ``Suite`` container."""

    def decorator(cls: type) -> type:
        return _mark(cls, Marker.SUITE_CLASSES, tuple(classes))

    return decorator
