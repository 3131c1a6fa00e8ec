"""
LLM factory for creating chat clients from configuration.
"""

from typing import Protocol

from memtrace.llm.openai_compatible import Message


class LLMProtocol(Protocol):
    """Protocol that all chat clients must implement."""

    model: str

    def chat(self, messages: list[Message]) -> str:
        """Run a chat completion and return the assistant message."""
        ...


def create_llm(temperature: float | None = None) -> LLMProtocol:
    """
    Create a chat client based on configuration settings.

    Args:
        temperature: Optional temperature override. If None, uses settings.llm_temperature

    Returns:
        Chat client that implements the LLMProtocol
    """
    from memtrace.config import settings
    from memtrace.llm.openai_compatible import ChatCompletionLLM

    temp = temperature if temperature is not None else settings.llm_temperature

    return ChatCompletionLLM(
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        api_key=settings.openai_api_key_value,
        temperature=temp,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
        max_retries=settings.llm_max_retries,
        retry_delay=settings.llm_retry_delay,
    )
