"""LLM clients."""

from memtrace.llm.factory import LLMProtocol, create_llm
from memtrace.llm.openai_compatible import ChatCompletionLLM

__all__ = ["ChatCompletionLLM", "LLMProtocol", "create_llm"]
