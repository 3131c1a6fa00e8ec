"""Memory-augmented chat."""

from memtrace.chat.assistant import (
    ChatResult,
    MemoryAssistant,
    build_system_prompt,
    create_assistant,
)

__all__ = ["ChatResult", "MemoryAssistant", "build_system_prompt", "create_assistant"]
