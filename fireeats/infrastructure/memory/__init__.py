"""In-memory document store (development backend and test fake)."""

from fireeats.infrastructure.memory.store import (
    MemoryCollectionReference,
    MemoryDocumentReference,
    MemoryDocumentStore,
    MemoryQuery,
    MemoryTransaction,
)

__all__ = [
    "MemoryCollectionReference",
    "MemoryDocumentReference",
    "MemoryDocumentStore",
    "MemoryQuery",
    "MemoryTransaction",
]
