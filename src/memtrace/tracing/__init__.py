"""
Observability and tracing with Arize Phoenix.

Provides OpenTelemetry-based tracing for memory and chat operations,
with automatic instrumentation of the OpenAI SDK used by mem0.
"""

from memtrace.tracing.phoenix import (
    add_span_attributes,
    get_tracer,
    is_tracing_active,
    project_url,
    record_exception,
    setup_tracing,
    shutdown_tracing,
    start_span,
    traced,
    traces_endpoint,
)

__all__ = [
    "add_span_attributes",
    "get_tracer",
    "is_tracing_active",
    "project_url",
    "record_exception",
    "setup_tracing",
    "shutdown_tracing",
    "start_span",
    "traced",
    "traces_endpoint",
]
