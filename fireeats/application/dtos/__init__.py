"""Application DTOs (no dependency on store adapters)."""

from fireeats.application.dtos.documents import (
    NO_INDEX,
    ChangeType,
    DocumentChange,
    DocumentSnapshot,
    ListenerRegistration,
    SnapshotCallback,
    compute_changes,
)

__all__ = [
    "NO_INDEX",
    "ChangeType",
    "DocumentChange",
    "DocumentSnapshot",
    "ListenerRegistration",
    "SnapshotCallback",
    "compute_changes",
]
