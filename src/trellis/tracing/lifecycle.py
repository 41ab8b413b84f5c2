"""Lifecycle of OpenTelemetry tracing for test runs.

Sets up the tracer provider and the streaming exporter, and exposes helpers
for getting a tracer, clearing the trace file and tracing custom steps.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from trellis.tracing.exporters import StreamingFileSpanExporter


_exporter: StreamingFileSpanExporter | None = None
_initialized = False


def init_tracing(
    *,
    service_name: str = "trellis",
    output_path: Path | str = "traces.jsonl",
) -> None:
    """Install a tracer provider that streams spans to ``output_path``.

    OpenTelemetry accepts a global provider only once per process, so later
    calls are no-ops.
    """
    global _exporter, _initialized

    if _initialized:
        return

    _exporter = StreamingFileSpanExporter(output_path)
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(SimpleSpanProcessor(_exporter))
    trace.set_tracer_provider(provider)
    _initialized = True


def is_initialized() -> bool:
    return _initialized


def set_trace_output_path(output_path: Path | str) -> None:
    """Redirect spans to another file, initializing tracing when needed."""
    if _exporter is None:
        init_tracing(output_path=output_path)
        return
    _exporter.output_path = Path(output_path)
    _exporter.reset()


def get_tracer(name: str = "trellis") -> trace.Tracer:
    return trace.get_tracer(name)


def clear_traces() -> None:
    """Truncate the trace file."""
    if _exporter is not None:
        _exporter.reset()


@contextmanager
def trace_step(name: str, attributes: dict[str, Any] | None = None) -> Iterator[trace.Span]:
    """Trace a custom step of test logic under the current span."""
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)
        yield span
