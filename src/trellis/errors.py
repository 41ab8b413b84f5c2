"""Engine error taxonomy."""

from __future__ import annotations

from collections.abc import Sequence


class TrellisError(Exception):
    """Base class for errors raised by the engine itself."""


class ConfigurationError(TrellisError):
    """A template cannot be turned into a runner.

    Raised while a runner is being built. It aborts that runner's subtree only;
    siblings in an enclosing suite are still built and run.
    """


class InitializationError(ConfigurationError):
    """One or more validation problems found while building a runner."""

    def __init__(self, causes: Sequence[BaseException] | BaseException | str) -> None:
        if isinstance(causes, str):
            causes = [ConfigurationError(causes)]
        elif isinstance(causes, BaseException):
            causes = [causes]
        self.causes: list[BaseException] = list(causes)
        super().__init__("; ".join(str(cause) for cause in self.causes))


class InstantiationError(TrellisError):
    """A template instance could not be built from its argument tuple."""


class AdapterFailure(TrellisError):
    """A legacy ``suite()`` factory raised instead of returning a suite."""

    def __init__(self, template: type, cause: BaseException) -> None:
        self.template = template
        self.cause = cause
        super().__init__(f"{template.__qualname__}.suite() failed: {cause}")


class NoTestsRemainError(TrellisError):
    """A filter removed every test from a runner."""
