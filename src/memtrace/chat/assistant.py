"""
Memory-augmented chat assistant.

One chat turn:
    1. Search the user's memories for the message
    2. Answer with the memories in the system prompt
    3. Store the exchange so later turns can recall it

The turn is one `chat_with_memory` trace; the memory calls and the LLM call
show up as its child spans in Phoenix.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from openinference.semconv.trace import OpenInferenceSpanKindValues, SpanAttributes
from opentelemetry.trace import Tracer, format_trace_id

from memtrace.llm.factory import LLMProtocol
from memtrace.memory.client import MemoryProtocol, memory_texts
from memtrace.memory.traced import MEMORY_COUNT, TracedMemory
from memtrace.tracing.phoenix import start_span, to_attribute_value

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Answer the question based on the query "
    "and the user's memories."
)


@dataclass
class ChatResult:
    """Outcome of one chat turn."""

    response: str
    memories: list[str] = field(default_factory=list)
    trace_id: Optional[str] = None


def build_system_prompt(memories: list[str]) -> str:
    """System prompt listing the memories recalled for this turn."""
    if not memories:
        return f"{SYSTEM_PROMPT}\nUser Memories: none yet."
    lines = "\n".join(f"- {m}" for m in memories)
    return f"{SYSTEM_PROMPT}\nUser Memories:\n{lines}"


class MemoryAssistant:
    """Chat assistant that remembers what each user tells it."""

    def __init__(
        self,
        memory: MemoryProtocol,
        llm: LLMProtocol,
        tracer: Optional[Tracer] = None,
        search_limit: Optional[int] = None,
    ):
        if search_limit is None:
            from memtrace.config import settings

            search_limit = settings.memory_search_limit

        self.memory = memory if isinstance(memory, TracedMemory) else TracedMemory(memory, tracer)
        self.llm = llm
        self.tracer = tracer
        self.search_limit = search_limit

    def chat(self, message: str, user_id: str) -> ChatResult:
        """
        Answer a message using the user's memories.

        Args:
            message: The user's message
            user_id: Whose memories to read and update

        Returns:
            ChatResult with the answer, the memories used and the trace id

        Raises:
            Any error from the memory store or the LLM, unchanged. The
            `chat_with_memory` span is marked ERROR with its message first.
        """
        attributes = {
            SpanAttributes.USER_ID: user_id,
            SpanAttributes.INPUT_VALUE: message,
        }
        with start_span(
            "chat_with_memory", attributes, OpenInferenceSpanKindValues.CHAIN, self.tracer
        ) as span:
            records = self.memory.search(message, user_id=user_id, limit=self.search_limit)
            memories = memory_texts(records)

            messages = [
                {"role": "system", "content": build_system_prompt(memories)},
                {"role": "user", "content": message},
            ]
            response = self._complete(messages)

            self.memory.add(
                [
                    {"role": "user", "content": message},
                    {"role": "assistant", "content": response},
                ],
                user_id=user_id,
            )

            span.set_attribute(MEMORY_COUNT, len(memories))
            span.set_attribute(SpanAttributes.OUTPUT_VALUE, response)

            context = span.get_span_context()
            trace_id = format_trace_id(context.trace_id) if span.is_recording() else None
            logger.info(f"Answered user {user_id} using {len(memories)} memories")
            return ChatResult(response=response, memories=memories, trace_id=trace_id)

    def _complete(self, messages: list[dict[str, str]]) -> str:
        model = getattr(self.llm, "model", None)
        attributes = {
            SpanAttributes.LLM_MODEL_NAME: model,
            SpanAttributes.INPUT_VALUE: to_attribute_value(messages),
        }
        with start_span(
            "llm.chat", attributes, OpenInferenceSpanKindValues.LLM, self.tracer
        ) as span:
            for i, msg in enumerate(messages):
                prefix = f"{SpanAttributes.LLM_INPUT_MESSAGES}.{i}.message"
                span.set_attribute(f"{prefix}.role", msg["role"])
                span.set_attribute(f"{prefix}.content", msg["content"])

            response = self.llm.chat(messages)

            prefix = f"{SpanAttributes.LLM_OUTPUT_MESSAGES}.0.message"
            span.set_attribute(f"{prefix}.role", "assistant")
            span.set_attribute(f"{prefix}.content", response)
            span.set_attribute(SpanAttributes.OUTPUT_VALUE, response)
            return response


def create_assistant() -> MemoryAssistant:
    """Build an assistant from configured memory and LLM clients."""
    from memtrace.llm.factory import create_llm
    from memtrace.memory.client import create_memory

    return MemoryAssistant(memory=create_memory(), llm=create_llm())
