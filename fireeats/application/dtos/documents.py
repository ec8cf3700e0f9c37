"""Document store value types shared by every store adapter.

DocumentSnapshot, DocumentChange and ListenerRegistration mirror the
shapes of the Firestore client API, so the mirrored collection and the
services do not depend on a particular adapter.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fireeats.application.interfaces.store import DocumentReference

NO_INDEX = -1


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time read of one document.

    The reference is the stable handle used to re-read or write the same
    document later; two snapshots denote the same document when their ids
    match.
    """

    reference: DocumentReference
    data: dict[str, Any] = field(default_factory=dict)
    exists: bool = True

    @property
    def id(self) -> str:
        return self.reference.id

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the document's field map ({} when it does not exist)."""
        return dict(self.data) if self.exists else {}


class ChangeType(str, Enum):
    """Kind of change delivered by a live query."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class DocumentChange:
    """One change in a live-query batch.

    Attributes:
        type: added, modified or removed.
        document: Snapshot after the change (before it, for removed).
        old_index: Position before the change; NO_INDEX for added.
        new_index: Position after the change; NO_INDEX for removed.
    """

    type: ChangeType
    document: DocumentSnapshot
    old_index: int = NO_INDEX
    new_index: int = NO_INDEX


# callback(changes, error): exactly one of the two carries information.
SnapshotCallback = Callable[[list[DocumentChange], Exception | None], None]


class ListenerRegistration:
    """Handle for an active live query; remove() stops delivery.

    remove() is idempotent and safe to call from any thread, including
    from inside the listener callback.
    """

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe
        self._removed = False
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return not self._removed

    def remove(self) -> None:
        with self._lock:
            if self._removed:
                return
            self._removed = True
        self._unsubscribe()


def compute_changes(
    previous: Sequence[DocumentSnapshot],
    current: Sequence[DocumentSnapshot],
) -> list[DocumentChange]:
    """Diff two ordered query results into a Firestore-style change list.

    Removals come first, each old_index taken against the list as already
    shrunk by earlier removals. Then, in result order, additions and content
    modifications follow with new_index equal to their final position.
    Applying the changes in order to `previous` yields `current` up to
    documents whose position shifted without a content change.
    """
    current_ids = {snap.id for snap in current}
    previous_by_id = {snap.id: snap for snap in previous}
    working = [snap.id for snap in previous]
    changes: list[DocumentChange] = []

    for snap in previous:
        if snap.id in current_ids:
            continue
        old_index = working.index(snap.id)
        working.pop(old_index)
        changes.append(
            DocumentChange(ChangeType.REMOVED, snap, old_index=old_index)
        )

    for new_index, snap in enumerate(current):
        before = previous_by_id.get(snap.id)
        if before is None:
            working.insert(min(new_index, len(working)), snap.id)
            changes.append(DocumentChange(ChangeType.ADDED, snap, new_index=new_index))
            continue
        if before.data == snap.data:
            continue
        old_index = working.index(snap.id)
        working.pop(old_index)
        working.insert(min(new_index, len(working)), snap.id)
        changes.append(
            DocumentChange(
                ChangeType.MODIFIED, snap, old_index=old_index, new_index=new_index
            )
        )
    return changes
