"""
Traced wrapper around a memory client.

Every memory operation gets its own span so a chat trace in Phoenix shows
which memories were searched, which were used, and what was stored.
"""

import logging
from typing import Any, Optional

from openinference.semconv.trace import (
    DocumentAttributes,
    OpenInferenceSpanKindValues,
    SpanAttributes,
)
from opentelemetry.trace import Span, Tracer

from memtrace.memory.client import MemoryProtocol, extract_results
from memtrace.tracing.phoenix import start_span, to_attribute_value

logger = logging.getLogger(__name__)

MEMORY_COUNT = "memory.count"


def _set_documents(span: Span, records: list[dict[str, Any]]) -> None:
    prefix = SpanAttributes.RETRIEVAL_DOCUMENTS
    for i, record in enumerate(records):
        if record.get("id") is not None:
            span.set_attribute(
                f"{prefix}.{i}.{DocumentAttributes.DOCUMENT_ID}", str(record["id"])
            )
        if record.get("memory"):
            span.set_attribute(
                f"{prefix}.{i}.{DocumentAttributes.DOCUMENT_CONTENT}", record["memory"]
            )
        if isinstance(record.get("score"), (int, float)):
            span.set_attribute(
                f"{prefix}.{i}.{DocumentAttributes.DOCUMENT_SCORE}", float(record["score"])
            )


class TracedMemory:
    """Memory client whose add/search/get_all calls are recorded as spans."""

    def __init__(self, memory: MemoryProtocol, tracer: Optional[Tracer] = None):
        self.memory = memory
        self.tracer = tracer

    def add(
        self,
        messages: Any,
        user_id: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """
        Store messages for a user.

        Args:
            messages: Chat messages (list of role/content dicts) or a string
            user_id: Owner of the memories
            metadata: Optional metadata stored with the memories

        Returns:
            Memory events reported by mem0 (ADD/UPDATE/DELETE/NONE)
        """
        attributes = {
            SpanAttributes.USER_ID: user_id,
            SpanAttributes.INPUT_VALUE: to_attribute_value(messages),
            SpanAttributes.METADATA: metadata,
        }
        with start_span(
            "memory.add", attributes, OpenInferenceSpanKindValues.TOOL, self.tracer
        ) as span:
            kwargs: dict[str, Any] = {"user_id": user_id}
            if metadata is not None:
                kwargs["metadata"] = metadata

            results = extract_results(self.memory.add(messages, **kwargs))

            span.set_attribute(MEMORY_COUNT, len(results))
            span.set_attribute(SpanAttributes.OUTPUT_VALUE, to_attribute_value(results))
            logger.debug(f"Stored {len(results)} memory events for user {user_id}")
            return results

    def search(self, query: str, user_id: str, limit: int = 3) -> list[dict[str, Any]]:
        """
        Search a user's memories.

        Args:
            query: Text to match memories against
            user_id: Owner of the memories
            limit: Maximum number of memories returned

        Returns:
            Matching memory records, best first
        """
        attributes = {
            SpanAttributes.USER_ID: user_id,
            SpanAttributes.INPUT_VALUE: query,
            "memory.limit": limit,
        }
        with start_span(
            "memory.search", attributes, OpenInferenceSpanKindValues.RETRIEVER, self.tracer
        ) as span:
            results = extract_results(
                self.memory.search(query, user_id=user_id, limit=limit)
            )[:limit]

            span.set_attribute(MEMORY_COUNT, len(results))
            _set_documents(span, results)
            logger.debug(f"Found {len(results)} memories for user {user_id}")
            return results

    def get_all(self, user_id: str) -> list[dict[str, Any]]:
        """Return every memory stored for a user."""
        attributes = {SpanAttributes.USER_ID: user_id}
        with start_span(
            "memory.get_all", attributes, OpenInferenceSpanKindValues.RETRIEVER, self.tracer
        ) as span:
            results = extract_results(self.memory.get_all(user_id=user_id))

            span.set_attribute(MEMORY_COUNT, len(results))
            _set_documents(span, results)
            return results
