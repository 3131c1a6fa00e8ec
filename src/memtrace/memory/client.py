"""
Memory client factory.

Creates the mem0 client selected by configuration: the open-source
`Memory` (optionally built from a JSON config file) or the hosted
`MemoryClient`.
"""

import json
import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class MemoryProtocol(Protocol):
    """Operations the assistant needs from a memory store."""

    def add(
        self,
        messages: Any,
        user_id: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Store messages (or a plain string) as memories for a user."""
        ...

    def search(self, query: str, user_id: str, limit: int = 3) -> Any:
        """Return memories of a user relevant to a query."""
        ...

    def get_all(self, user_id: str) -> Any:
        """Return every memory stored for a user."""
        ...


def extract_results(payload: Any) -> list[dict[str, Any]]:
    """
    Normalize a mem0 response to a list of memory records.

    mem0 returns `{"results": [...]}` (optionally with `relations`) from the
    open-source client and from newer platform API versions, and a bare list
    from older ones.
    """
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("results") or []
    return [item for item in payload if isinstance(item, dict)]


def memory_texts(records: list[dict[str, Any]]) -> list[str]:
    """Text of each memory record, skipping records without one."""
    return [r["memory"] for r in records if r.get("memory")]


def create_memory() -> MemoryProtocol:
    """
    Create a memory client based on configuration settings.

    Returns:
        mem0 client implementing MemoryProtocol

    Raises:
        ValueError: platform backend selected without MEM0_API_KEY
        FileNotFoundError: memory_config_path does not exist
    """
    from memtrace.config import settings

    if settings.memory_backend == "platform":
        if not settings.mem0_api_key_value:
            raise ValueError("MEM0_API_KEY is required for the platform memory backend")

        from mem0 import MemoryClient

        logger.info("Using hosted mem0 platform memory")
        return MemoryClient(api_key=settings.mem0_api_key_value)

    from mem0 import Memory

    if settings.memory_config_path is not None:
        config = json.loads(settings.memory_config_path.read_text(encoding="utf-8"))
        logger.info(f"Using local mem0 memory configured from {settings.memory_config_path}")
        return Memory.from_config(config)

    logger.info("Using local mem0 memory with default configuration")
    return Memory()
