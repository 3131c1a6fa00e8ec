"""
Arize Phoenix tracing integration.

Registers an OpenTelemetry tracer provider that exports to Phoenix and
provides the span helpers used around memory and chat operations.

Usage:
    from memtrace.tracing import setup_tracing, start_span

    setup_tracing()  # Call once at application startup

    with start_span("chat_with_memory", {"user.id": "alice"}) as span:
        ...
"""

import functools
import json
import logging
import warnings
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar

from openinference.semconv.trace import OpenInferenceSpanKindValues, SpanAttributes
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TRACER_NAME = "memtrace"
TRACES_PATH = "/v1/traces"

_tracer_provider: Optional[Any] = None


def traces_endpoint(base_url: str) -> str:
    """Return the OTLP/HTTP traces URL for a Phoenix collector base URL."""
    base_url = base_url.rstrip("/")
    if base_url.endswith(TRACES_PATH):
        return base_url
    return f"{base_url}{TRACES_PATH}"


def project_url() -> str:
    """URL of the Phoenix "Projects" view where the traces can be inspected."""
    from memtrace.config import settings

    endpoint = settings.phoenix_collector_endpoint.rstrip("/")
    if endpoint.endswith(TRACES_PATH):
        endpoint = endpoint[: -len(TRACES_PATH)]
    return f"{endpoint}/projects"


def setup_tracing() -> Optional[Any]:
    """
    Initialize Phoenix tracing with OpenTelemetry.

    Should be called once at application startup, before the memory client
    is created, so the OpenAI calls mem0 makes are instrumented too.
    Calling it again returns the provider that is already registered.

    Returns:
        The registered tracer provider, or None when tracing is disabled
        or could not be set up.

    Example:
        # Start Phoenix server first:
        # phoenix serve

        from memtrace.tracing import setup_tracing
        setup_tracing()
    """
    global _tracer_provider

    from memtrace.config import settings

    if not settings.enable_tracing:
        return None

    if _tracer_provider is not None:
        return _tracer_provider

    try:
        from phoenix.otel import register

        headers = None
        if settings.phoenix_api_key_value:
            headers = {"authorization": f"Bearer {settings.phoenix_api_key_value}"}

        tracer_provider = register(
            project_name=settings.phoenix_project_name,
            endpoint=traces_endpoint(settings.phoenix_collector_endpoint),
            batch=settings.tracing_batch,
            auto_instrument=settings.auto_instrument,
            headers=headers,
        )

    except ImportError:
        warnings.warn(
            "Phoenix tracing dependencies not installed. "
            "Install with: pip install memtrace"
        )
        return None
    except Exception as e:
        warnings.warn(f"Failed to setup tracing: {e}")
        return None

    # register() has already installed the global provider
    _tracer_provider = tracer_provider

    if settings.instrument_openai:
        try:
            from openinference.instrumentation.openai import OpenAIInstrumentor

            OpenAIInstrumentor().instrument(tracer_provider=tracer_provider)
        except Exception as e:
            warnings.warn(f"Failed to instrument OpenAI: {e}")

    logger.info(
        f"Tracing to {traces_endpoint(settings.phoenix_collector_endpoint)} "
        f"(project: {settings.phoenix_project_name})"
    )
    return tracer_provider


def shutdown_tracing() -> None:
    """Flush pending spans and forget the registered provider."""
    global _tracer_provider

    if _tracer_provider is None:
        return

    provider, _tracer_provider = _tracer_provider, None
    try:
        provider.shutdown()
    except Exception as e:
        logger.warning(f"Tracer provider shutdown failed: {e}")


def is_tracing_active() -> bool:
    """True once setup_tracing() has registered a provider."""
    return _tracer_provider is not None


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """
    Get a tracer handle.

    Uses the provider registered by setup_tracing(); falls back to the
    global provider, which is a no-op until something is registered.
    """
    if _tracer_provider is not None:
        return _tracer_provider.get_tracer(name)
    return trace.get_tracer(name)


def to_attribute_value(value: Any) -> Any:
    """Convert a value to something OpenTelemetry accepts as an attribute."""
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


@contextmanager
def start_span(
    name: str,
    attributes: Optional[Mapping[str, Any]] = None,
    kind: OpenInferenceSpanKindValues = OpenInferenceSpanKindValues.CHAIN,
    tracer: Optional[Tracer] = None,
) -> Iterator[Span]:
    """
    Run a block inside a span.

    The span starts with `attributes` plus its OpenInference span kind and
    ends when the block exits. If the block raises, the span is marked
    ERROR with the exception message, the exception is recorded, and it is
    re-raised unchanged. Otherwise the span is marked OK unless the block
    already set a status.

    Args:
        name: Span name
        attributes: Initial span attributes (None values are skipped)
        kind: OpenInference span kind
        tracer: Tracer to use (defaults to get_tracer())
    """
    tracer = tracer or get_tracer()

    span_attributes = {SpanAttributes.OPENINFERENCE_SPAN_KIND: kind.value}
    for key, value in (attributes or {}).items():
        if value is not None:
            span_attributes[key] = to_attribute_value(value)

    with tracer.start_as_current_span(
        name,
        attributes=span_attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise

        status = getattr(span, "status", None)
        if status is None or status.status_code is StatusCode.UNSET:
            span.set_status(Status(StatusCode.OK))


def traced(
    name: Optional[str] = None,
    kind: OpenInferenceSpanKindValues = OpenInferenceSpanKindValues.CHAIN,
) -> Callable[[F], F]:
    """
    Decorator to add tracing span to a function.

    Args:
        name: Span name (defaults to function name)
        kind: OpenInference span kind

    Returns:
        Decorated function with tracing

    Example:
        @traced("load_profile")
        def load_profile(user_id):
            ...
    """
    def decorator(func: F) -> F:
        span_name = name or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            from memtrace.config import settings

            if not settings.enable_tracing:
                return func(*args, **kwargs)

            attributes = {
                "function.name": func.__name__,
                "function.module": func.__module__,
            }
            with start_span(span_name, attributes, kind=kind) as span:
                result = func(*args, **kwargs)
                span.set_attribute("result.type", type(result).__name__)
                return result

        return wrapper  # type: ignore

    return decorator


def add_span_attributes(**attributes: Any) -> None:
    """
    Add attributes to the current span.

    Args:
        **attributes: Key-value pairs to add as span attributes

    Example:
        add_span_attributes(memory_count=3, model="gpt-4o-mini")
    """
    from memtrace.config import settings

    if not settings.enable_tracing:
        return

    span = trace.get_current_span()
    for key, value in attributes.items():
        if value is None:
            continue
        span.set_attribute(key, to_attribute_value(value))


def record_exception(exception: Exception) -> None:
    """
    Record an exception in the current span and mark it as failed.

    Args:
        exception: Exception to record
    """
    from memtrace.config import settings

    if not settings.enable_tracing:
        return

    span = trace.get_current_span()
    span.record_exception(exception)
    span.set_status(Status(StatusCode.ERROR, str(exception)))
