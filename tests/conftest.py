"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - An in-memory OpenTelemetry pipeline for span assertions
    - Fake mem0 memory and LLM clients
"""

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """Provide test settings without requiring .env file."""
    with patch.dict(
        "os.environ",
        {
            "PHOENIX_COLLECTOR_ENDPOINT": "https://app.phoenix.arize.com/",
            "PHOENIX_API_KEY": "test-phoenix-key",
            "PHOENIX_PROJECT_NAME": "test-project",
            "OPENAI_API_KEY": "test-openai-key",
            "MEMORY_BACKEND": "local",
            "MEMORY_SEARCH_LIMIT": "5",
            "ENABLE_TRACING": "false",
        },
    ):
        from memtrace.config import Settings
        yield Settings(_env_file=None)


@pytest.fixture(autouse=True)
def reset_tracer_provider():
    """Make sure no test leaks a registered provider into the next."""
    import memtrace.tracing.phoenix as phoenix_module

    phoenix_module._tracer_provider = None
    yield
    phoenix_module._tracer_provider = None


# =============================================================================
# Tracing Fixtures
# =============================================================================

@pytest.fixture
def span_exporter():
    """Exporter collecting finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    """SDK tracer provider that exports synchronously to span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def tracer(tracer_provider):
    """Tracer handle from the in-memory provider."""
    return tracer_provider.get_tracer("memtrace.tests")


@pytest.fixture
def spans_by_name(span_exporter):
    """Callable returning finished spans keyed by name."""
    def _spans() -> dict:
        return {span.name: span for span in span_exporter.get_finished_spans()}
    return _spans


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_memories():
    """Memory records in mem0's search response shape."""
    return [
        {"id": "m-1", "memory": "Is vegetarian", "score": 0.91, "user_id": "alice"},
        {"id": "m-2", "memory": "Allergic to peanuts", "score": 0.74, "user_id": "alice"},
    ]


@pytest.fixture
def mock_memory(sample_memories):
    """Fake mem0 client returning canned responses."""
    memory = MagicMock()
    memory.search.return_value = {"results": sample_memories}
    memory.get_all.return_value = {"results": sample_memories}
    memory.add.return_value = {
        "results": [{"id": "m-3", "memory": "Likes Thai food", "event": "ADD"}]
    }
    return memory


@pytest.fixture
def mock_llm():
    """Fake chat client."""
    llm = MagicMock()
    llm.model = "gpt-4o-mini"
    llm.chat.return_value = "Try a peanut-free vegetable green curry."
    return llm
