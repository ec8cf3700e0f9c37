"""Document store interfaces (ports) for the application layer.

Protocols define the subset of the Firestore client API the service uses.
Infrastructure adapters (in-memory, Firestore REST) implement them; the
mirrored collection and the services only see these types.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

from fireeats.application.dtos.documents import (
    DocumentSnapshot,
    ListenerRegistration,
    SnapshotCallback,
)

T = TypeVar("T")


class DocumentReference(Protocol):
    """Handle to a single document (may or may not exist yet)."""

    @property
    def id(self) -> str:
        """Document ID (last path segment)."""

    @property
    def path(self) -> str:
        """Slash-separated path relative to the database root."""

    def collection(self, collection_id: str) -> CollectionReference:
        """Return a subcollection under this document."""

    async def get(self) -> DocumentSnapshot:
        """Read the document; snapshot.exists is False when it is missing."""

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document."""

    async def update(self, data: dict[str, Any]) -> None:
        """Merge fields into an existing document; fails if it does not exist."""

    async def delete(self) -> None:
        """Delete the document; no-op when it is already missing."""


class Query(Protocol):
    """Filter, sort and limit, resolved by the store."""

    def where(self, field: str, op: str, value: Any) -> Query:
        """Return a query with an added filter (only '==' is required)."""

    def order_by(self, field: str, direction: str = "ASCENDING") -> Query:
        """Return a query ordered by field."""

    def limit(self, count: int) -> Query:
        """Return a query returning at most count documents."""

    async def get(self) -> list[DocumentSnapshot]:
        """Run the query once and return the matching documents in order."""

    def on_snapshot(self, callback: SnapshotCallback) -> ListenerRegistration:
        """Start a live query.

        The callback receives an initial batch of added changes, then one
        batch per change to the result set. It may be called on any thread.
        An error is delivered once as callback([], error) and ends the
        listener.
        """


class CollectionReference(Query, Protocol):
    """A collection; also the unfiltered query over it."""

    @property
    def id(self) -> str:
        """Collection ID (last path segment)."""

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document; a new unique ID is generated when omitted."""


class Transaction(Protocol):
    """One attempt of a read-then-write transaction.

    Reads must come before writes. Writes are buffered and applied
    atomically at commit.
    """

    async def get(self, reference: DocumentReference) -> DocumentSnapshot:
        """Read a document inside the transaction."""

    def set(self, reference: DocumentReference, data: dict[str, Any]) -> None:
        """Buffer a create-or-overwrite."""

    def update(self, reference: DocumentReference, data: dict[str, Any]) -> None:
        """Buffer a field merge into an existing document."""


TransactionFunction = Callable[[Transaction], Awaitable[T]]


class DocumentStore(Protocol):
    """Entry point to a document database."""

    def collection(self, collection_id: str) -> CollectionReference:
        """Return a top-level collection."""

    def document(self, path: str) -> DocumentReference:
        """Return a document by slash-separated path (e.g. 'restaurants/abc')."""

    async def run_transaction(
        self,
        fn: TransactionFunction[T],
        max_attempts: int = 5,
    ) -> T:
        """Run fn in a transaction, retrying on conflict up to max_attempts.

        Raises:
            TransactionFailedException: If every attempt conflicted or the commit failed.
            Any exception raised by fn (the attempt is rolled back, not retried).
        """

    async def aclose(self) -> None:
        """Release connections and stop live queries."""
