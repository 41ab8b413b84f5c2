"""Test outcome control flow."""

from typing import NoReturn


class FailTest(BaseException):
    """Explicitly fail the current test."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(reason)


class AssumptionViolation(BaseException):
    """A precondition of the current test does not hold."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(reason)


def fail(reason: str = "") -> NoReturn:
    """Explicitly fail the current test."""
    raise FailTest(reason)


def assume(condition: object, reason: str = "") -> None:
    """Stop the current test without failing it when ``condition`` is false."""
    if not condition:
        raise AssumptionViolation(reason or "assumption failed")


def skip(reason: str = "") -> NoReturn:
    """Skip the rest of the current test."""
    raise AssumptionViolation(reason)
