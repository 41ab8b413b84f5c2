from trellis.runners.base import ParentRunner, Runner
from trellis.runners.class_runner import ClassRunner
from trellis.runners.error import INITIALIZATION_ERROR, ErrorReportingRunner, IgnoredClassRunner
from trellis.runners.legacy import LegacySuiteAdapter, ModernTestAdapter, SuiteMethod, describe_test
from trellis.runners.parameterized import ClassRunnerForParameters, Parameterized
from trellis.runners.suite import Suite

__all__ = [
    "INITIALIZATION_ERROR",
    "ClassRunner",
    "ClassRunnerForParameters",
    "ErrorReportingRunner",
    "IgnoredClassRunner",
    "LegacySuiteAdapter",
    "ModernTestAdapter",
    "Parameterized",
    "ParentRunner",
    "Runner",
    "Suite",
    "SuiteMethod",
    "describe_test",
]
