"""Read-only view of a test template: constructors and marked methods."""

from __future__ import annotations

import asyncio
import inspect
import logging
import unittest
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from trellis.description import qualified_name
from trellis.errors import ConfigurationError, InstantiationError
from trellis.markers import Marker, get_markers, own_markers


logger = logging.getLogger(__name__)

MethodKind = Literal["instance", "static", "class"]


@dataclass(frozen=True)
class TestMethod:
    """A method found on a template, with the way it has to be called."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    name: str
    fn: Callable[..., Any]
    kind: MethodKind
    template: type

    @property
    def markers(self) -> dict[Marker, Any]:
        return get_markers(self.fn)

    @property
    def is_ignored(self) -> bool:
        return Marker.IGNORE in self.markers

    @property
    def ignore_reason(self) -> str:
        return self.markers.get(Marker.IGNORE) or ""

    @property
    def is_static(self) -> bool:
        """True for static and class methods, which need no instance."""
        return self.kind != "instance"

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn)

    def parameter_names(self) -> list[str]:
        """Declared parameters, excluding ``self``/``cls``."""
        params = list(inspect.signature(self.fn).parameters)
        if self.kind != "static" and params:
            params = params[1:]
        return params

    def invoke(self, target: Any = None, *args: Any) -> Any:
        """Call the method; coroutine methods are driven to completion."""
        if self.kind == "static":
            result = self.fn(*args)
        elif self.kind == "class":
            result = self.fn(self.template, *args)
        else:
            result = self.fn(target, *args)
        if inspect.iscoroutine(result):
            return asyncio.run(result)
        return result

    def validate_public_void_no_arg(self, *, is_static: bool, errors: list[BaseException]) -> None:
        """Collect a validation error for each rule this method breaks."""
        if self.is_static != is_static:
            state = "should" if is_static else "should not"
            errors.append(ConfigurationError(f"Method {self.name}() {state} be static"))
        if not self.is_public:
            errors.append(ConfigurationError(f"Method {self.name}() should be public"))
        if self.parameter_names():
            errors.append(ConfigurationError(f"Method {self.name} should have no parameters"))


@dataclass(frozen=True)
class Constructor:
    """A way to build an instance of a template from positional arguments."""

    template: type
    factory: Callable[..., Any]
    name: str

    def signature(self) -> inspect.Signature:
        return inspect.signature(self.factory)

    def arity(self) -> int:
        """Number of positional parameters, or -1 when it takes ``*args``."""
        count = 0
        for param in self.signature().parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return -1
            if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                count += 1
        return count

    def accepts(self, count: int) -> bool:
        """True when ``count`` positional arguments bind to the signature."""
        try:
            self.signature().bind(*([None] * count))
        except TypeError:
            return False
        return True

    def new_instance(self, args: Sequence[Any] = ()) -> Any:
        """Build an instance, raising ``InstantiationError`` on any mismatch."""
        args = tuple(args)
        try:
            self.signature().bind(*args)
        except TypeError as e:
            msg = f"{self.template.__qualname__}.{self.name} cannot be called with {len(args)} argument(s): {e}"
            raise InstantiationError(msg) from e
        try:
            return self.factory(*args)
        except Exception as e:
            msg = f"{self.template.__qualname__}.{self.name} raised {type(e).__name__}: {e}"
            raise InstantiationError(msg) from e


class TestClassModel:
    """Cached metadata of one template class.

    Methods are collected once, walking the MRO from the most basic class to
    the template so that overriding a method in a subclass replaces it (and its
    markers) without changing its position.
    """

    __test__ = False  # Prevent pytest from collecting this as a test class

    def __init__(self, cls: type) -> None:
        if not isinstance(cls, type):
            msg = f"Test template must be a class, got {cls!r}"
            raise ConfigurationError(msg)
        self.cls = cls
        self.name = qualified_name(cls)
        self._methods = self._collect_methods(cls)
        self._by_marker: dict[Marker, list[TestMethod]] = {}
        for method in self._methods.values():
            for marker in method.markers:
                self._by_marker.setdefault(marker, []).append(method)
        logger.debug(
            "Scanned %s: %s",
            self.name,
            {marker.value: len(methods) for marker, methods in self._by_marker.items()},
        )

    @staticmethod
    def _collect_methods(cls: type) -> dict[str, TestMethod]:
        raw: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            raw.update(vars(klass))

        methods: dict[str, TestMethod] = {}
        for name, attr in raw.items():
            if isinstance(attr, staticmethod):
                methods[name] = TestMethod(name, attr.__func__, "static", cls)
            elif isinstance(attr, classmethod):
                methods[name] = TestMethod(name, attr.__func__, "class", cls)
            elif inspect.isfunction(attr):
                methods[name] = TestMethod(name, attr, "instance", cls)
        return methods

    @property
    def simple_name(self) -> str:
        return self.cls.__qualname__

    @property
    def markers(self) -> dict[Marker, Any]:
        """Class markers, including the ones inherited from bases."""
        return get_markers(self.cls)

    @property
    def own_markers(self) -> dict[Marker, Any]:
        return own_markers(self.cls)

    @property
    def is_unittest_case(self) -> bool:
        return issubclass(self.cls, unittest.TestCase)

    def method(self, name: str) -> TestMethod | None:
        return self._methods.get(name)

    def annotated_methods(self, marker: Marker) -> list[TestMethod]:
        """Methods carrying ``marker``, in collection order."""
        return list(self._by_marker.get(marker, []))

    def suite_factory(self) -> TestMethod | None:
        """The legacy ``suite()`` factory, when the template declares one."""
        method = self._methods.get("suite")
        if method is not None and method.is_static:
            return method
        return None

    def constructors(self) -> list[Constructor]:
        """Marked constructors, or the class itself when none is marked."""
        marked = self.annotated_methods(Marker.CONSTRUCTOR)
        if marked:
            return [
                Constructor(self.cls, getattr(self.cls, method.name), method.name)
                for method in marked
            ]
        return [Constructor(self.cls, self.cls, "__init__")]

    def only_constructor(self) -> Constructor:
        constructors = self.constructors()
        if len(constructors) != 1:
            msg = f"Test class {self.simple_name} should have exactly one public constructor, found {len(constructors)}"
            raise ConfigurationError(msg)
        return constructors[0]

    def nested_classes(self) -> list[type]:
        """Classes declared in the template body, in declaration order."""
        prefix = f"{self.cls.__qualname__}."
        return [
            value
            for name, value in vars(self.cls).items()
            if isinstance(value, type) and not name.startswith("_") and value.__qualname__.startswith(prefix)
        ]

    def __repr__(self) -> str:
        return f"TestClassModel({self.name})"
