"""
Memory layer: mem0 client creation and span-recording wrapper.
"""

from memtrace.memory.client import (
    MemoryProtocol,
    create_memory,
    extract_results,
    memory_texts,
)
from memtrace.memory.traced import TracedMemory

__all__ = [
    "MemoryProtocol",
    "TracedMemory",
    "create_memory",
    "extract_results",
    "memory_texts",
]
