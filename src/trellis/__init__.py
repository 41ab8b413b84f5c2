"""Trellis - test-plan execution engine with parameterized and legacy suite support."""

from .builder import RunnerBuilder
from .core import Core, run_classes, runner_for
from .description import Description
from .errors import (
    AdapterFailure,
    ConfigurationError,
    InitializationError,
    InstantiationError,
    NoTestsRemainError,
    TrellisError,
)
from .filter import Filter
from .markers import constructor, ignore, parameters, run_with, suite_classes, test
from .notification import Failure, RunListener, RunNotifier
from .outcomes import AssumptionViolation, FailTest, assume, fail, skip
from .parameters import ParameterSet
from .result import Result
from .runners import ModernTestAdapter, Parameterized, Suite
from .tracing import init_tracing, trace_step
from .version import __version__


__all__ = [
    # Markers
    "test",
    "ignore",
    "parameters",
    "constructor",
    "run_with",
    "suite_classes",
    # Runners
    "Parameterized",
    "Suite",
    "ModernTestAdapter",
    "RunnerBuilder",
    "ParameterSet",
    # Running
    "Core",
    "run_classes",
    "runner_for",
    "Description",
    "Filter",
    "Failure",
    "Result",
    "RunListener",
    "RunNotifier",
    # Outcomes
    "fail",
    "assume",
    "skip",
    "FailTest",
    "AssumptionViolation",
    # Errors
    "TrellisError",
    "ConfigurationError",
    "InitializationError",
    "InstantiationError",
    "AdapterFailure",
    "NoTestsRemainError",
    # Tracing
    "init_tracing",
    "trace_step",
]
