"""Per-test spans."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from opentelemetry.trace import Span, StatusCode

from trellis.outcomes import AssumptionViolation
from trellis.tracing.lifecycle import get_tracer


if TYPE_CHECKING:
    from trellis.description import Description


@dataclass
class TestTracer:
    """Opens one span per executed test when enabled."""

    __test__ = False  # Prevent pytest from collecting this as a test class

    enabled: bool = False

    @contextmanager
    def span(self, description: Description) -> Iterator[Span | None]:
        if not self.enabled:
            yield None
            return

        with get_tracer().start_as_current_span(f"test.{description.display_name}") as span:
            span.set_attribute("test.name", description.method_name or description.display_name)
            if description.class_name:
                span.set_attribute("test.class", description.class_name)
            yield span

    def record(self, span: Span | None, error: BaseException | None, duration_ms: float) -> None:
        """Record the outcome of the test on its span."""
        if span is None:
            return
        span.set_attribute("test.duration_ms", duration_ms)
        if error is None:
            span.set_attribute("test.status", "passed")
            return
        if isinstance(error, AssumptionViolation):
            span.set_attribute("test.status", "skipped")
            return
        span.set_attribute("test.status", "failed")
        span.set_status(StatusCode.ERROR, str(error))
        span.record_exception(error)
