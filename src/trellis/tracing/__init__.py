from trellis.tracing.lifecycle import (
    clear_traces,
    get_tracer,
    init_tracing,
    is_initialized,
    set_trace_output_path,
    trace_step,
)
from trellis.tracing.tracer import TestTracer

__all__ = [
    "TestTracer",
    "clear_traces",
    "get_tracer",
    "init_tracing",
    "is_initialized",
    "set_trace_output_path",
    "trace_step",
]
