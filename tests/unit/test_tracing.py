"""Tests for trellis.tracing module."""

import json

import pytest
from opentelemetry.sdk.trace.export import SpanExportResult

from trellis import test
from trellis.runners import ClassRunner
from trellis.notification import RunNotifier
from trellis.tracing import (
    TestTracer,
    clear_traces,
    get_tracer,
    init_tracing,
    is_initialized,
    set_trace_output_path,
    trace_step,
)
from trellis.tracing.exporters import StreamingFileSpanExporter


@pytest.fixture(scope="module", autouse=True)
def setup_tracing_once(tmp_path_factory):
    """Initialize tracing once for all tests in this module."""
    init_tracing(output_path=tmp_path_factory.mktemp("traces") / "traces.jsonl")


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "traces.jsonl"
    set_trace_output_path(path)
    yield path
    clear_traces()


def read_spans(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestInitTracing:
    """Tests for init_tracing function."""

    def test_init_tracing_sets_up_provider(self):
        assert is_initialized()
        assert get_tracer() is not None

    def test_init_tracing_idempotent(self):
        init_tracing()  # Should not raise
        assert is_initialized()


class TestTraceStep:
    """Tests for trace_step context manager."""

    def test_trace_step_creates_span(self, trace_file):
        with trace_step("test_step"):
            pass

        spans = read_spans(trace_file)
        assert len(spans) == 1
        assert spans[0]["name"] == "test_step"

    def test_trace_step_with_attributes(self, trace_file):
        with trace_step("step_with_attrs", {"key": "value", "count": 42}):
            pass

        attrs = read_spans(trace_file)[0]["attributes"]
        assert attrs["key"] == "value"
        assert attrs["count"] == 42

    def test_clear_traces_truncates(self, trace_file):
        with trace_step("gone"):
            pass
        clear_traces()
        assert read_spans(trace_file) == []


class TestTestTracer:
    """Tests for per-test spans."""

    def make_template(self):
        class Template:
            @test
            def passes(self):
                with trace_step("inner"):
                    pass

            @test
            def fails(self):
                raise ValueError("boom")

        return Template

    def test_disabled_tracer_writes_nothing(self, trace_file):
        ClassRunner(self.make_template(), tracer=TestTracer(enabled=False)).run(RunNotifier())
        assert [span["name"] for span in read_spans(trace_file)] == ["inner"]

    def test_span_per_test_with_status(self, trace_file):
        template = self.make_template()
        ClassRunner(template, tracer=TestTracer(enabled=True)).run(RunNotifier())

        spans = read_spans(trace_file)
        by_name = {span["name"]: span for span in spans}
        passed = by_name[f"test.passes({template.__module__}.{template.__qualname__})"]
        failed = by_name[f"test.fails({template.__module__}.{template.__qualname__})"]

        assert passed["attributes"]["test.status"] == "passed"
        assert passed["attributes"]["test.name"] == "passes"
        assert failed["attributes"]["test.status"] == "failed"
        assert failed["status"]["code"] == "ERROR"
        assert failed["events"][0]["name"] == "exception"
        assert by_name["inner"]["parentSpanId"] == passed["spanId"]


class TestStreamingFileSpanExporter:
    """Tests for the JSONL span exporter."""

    def test_unwritable_output_reports_failure(self, tmp_path):
        path = tmp_path / "spans.jsonl"
        exporter = StreamingFileSpanExporter(path)
        path.unlink()
        path.mkdir()

        assert exporter.export([]) == SpanExportResult.FAILURE
