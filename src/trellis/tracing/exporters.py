"""Streaming JSONL exporter for test spans.

Each finished span is appended to the output file as one JSON line, so a long
run never keeps its spans in memory.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult


logger = logging.getLogger(__name__)


class StreamingFileSpanExporter(SpanExporter):
    """Appends spans to a JSONL file as they finish."""

    def __init__(self, output_path: Path | str) -> None:
        self.output_path = Path(output_path)
        self.reset()

    def reset(self) -> None:
        """Create the parent directory and truncate the file."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text("")

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        try:
            with self.output_path.open("a", encoding="utf-8") as f:
                for span in spans:
                    f.write(json.dumps(self._span_to_dict(span), default=str) + "\n")
        except OSError as e:
            logger.error("Cannot write spans to %s: %s", self.output_path, e)
            return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        """Nothing to release; the file is reopened on every export."""

    def _span_to_dict(self, span: ReadableSpan) -> dict[str, Any]:
        context = span.get_span_context()
        return {
            "traceId": format(context.trace_id, "032x"),
            "spanId": format(context.span_id, "016x"),
            "parentSpanId": format(span.parent.span_id, "016x") if span.parent else None,
            "name": span.name,
            "startTimeUnixNano": span.start_time,
            "endTimeUnixNano": span.end_time,
            "attributes": _plain(span.attributes),
            "status": {"code": span.status.status_code.name},
            "events": [
                {"name": event.name, "timeUnixNano": event.timestamp, "attributes": _plain(event.attributes)}
                for event in span.events
            ],
            "resource": {"attributes": _plain(span.resource.attributes)},
        }


def _plain(attrs: Mapping[str, Any] | None) -> dict[str, Any]:
    if not attrs:
        return {}
    return {key: list(value) if isinstance(value, tuple) else value for key, value in attrs.items()}
