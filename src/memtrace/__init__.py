"""
memtrace: memory-augmented chat traced with Arize Phoenix

Wires a mem0 memory store and an OpenAI-compatible chat model together and
records every chat turn, memory lookup and completion as OpenTelemetry spans
exported to Phoenix.

Key Components:
    - config: environment-driven settings (Phoenix endpoint, API keys, ...)
    - tracing: Phoenix registration and span helpers
    - memory: mem0 client factory and traced wrapper (add/search/get_all)
    - llm: OpenAI-compatible chat completion client
    - chat: the memory-augmented assistant
    - api: FastAPI REST endpoints

Example:
    >>> from memtrace.tracing import setup_tracing
    >>> from memtrace.chat import create_assistant
    >>> setup_tracing()
    >>> result = create_assistant().chat("I love hiking", user_id="alice")
    >>> print(result.response, result.trace_id)
"""

__version__ = "0.1.0"

from memtrace.config import settings

__all__ = [
    "__version__",
    "settings",
]
