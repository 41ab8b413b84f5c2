"""Resolution of a template's data provider into named parameter sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from trellis.errors import ConfigurationError
from trellis.markers import Marker
from trellis.model import TestClassModel, TestMethod
from trellis.outcomes import AssumptionViolation, FailTest


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSet:
    """One named argument tuple for a template's constructor.

    Several sets may share a name; they stay distinct because sets are kept
    in an ordered tuple, never keyed by name.
    """

    name: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class ShapeError:
    """Why a data provider's return value could not be decoded."""

    reason: str


def _as_row(raw: Any) -> tuple[Any, ...] | None:
    if isinstance(raw, (tuple, list)):
        return tuple(raw)
    return None


def decode_parameters(raw: Any) -> tuple[ParameterSet, ...] | ShapeError:
    """Decode a data provider's return value.

    A mapping of name to row keeps its keys as names. Any other ordered
    iterable is named by zero-based position; a ``ParameterSet`` element keeps
    its own name. Rows are tuples or lists.
    """
    sets: list[ParameterSet] = []

    if isinstance(raw, Mapping):
        for key, value in raw.items():
            row = _as_row(value)
            if row is None:
                return ShapeError(f"value for {key!r} is a {type(value).__name__}, not a tuple")
            sets.append(ParameterSet(key, row))
        return tuple(sets)

    if isinstance(raw, (str, bytes, set, frozenset)) or not isinstance(raw, Iterable):
        return ShapeError(f"got {type(raw).__name__}")

    for index, value in enumerate(raw):
        if isinstance(value, ParameterSet):
            sets.append(value)
            continue
        row = _as_row(value)
        if row is None:
            return ShapeError(f"element {index} is a {type(value).__name__}, not a tuple")
        sets.append(ParameterSet(str(index), row))
    return tuple(sets)


def parameters_method(model: TestClassModel) -> TestMethod:
    """The single public static/class method marked ``@parameters``."""
    candidates = [
        method
        for method in model.annotated_methods(Marker.PARAMETERS)
        if method.is_static and method.is_public
    ]
    if not candidates:
        msg = f"No public static parameters method on class {model.name}"
        raise ConfigurationError(msg)
    if len(candidates) > 1:
        names = ", ".join(f"{method.name}()" for method in candidates)
        msg = f"Class {model.name} has more than one public static parameters method: {names}"
        raise ConfigurationError(msg)
    return candidates[0]


def resolve_parameter_sets(model: TestClassModel) -> tuple[ParameterSet, ...]:
    """Invoke the data provider once and return its sets in source order."""
    method = parameters_method(model)
    try:
        raw = method.invoke()
    except (Exception, FailTest, AssumptionViolation) as e:
        msg = f"{model.name}.{method.name}() raised {type(e).__name__}: {e}"
        raise ConfigurationError(msg) from e

    decoded = decode_parameters(raw)
    if isinstance(decoded, ShapeError):
        msg = (
            f"{model.name}.{method.name}() must return a collection of tuples "
            f"or a mapping of name to tuple ({decoded.reason})"
        )
        raise ConfigurationError(msg)
    if not decoded:
        msg = f"{model.name}.{method.name}() returned no parameter sets"
        raise ConfigurationError(msg)

    logger.debug("Resolved %d parameter sets for %s", len(decoded), model.name)
    return decoded
