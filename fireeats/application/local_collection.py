"""Local mirror of a live query's result set.

LocalCollection subscribes to a store query and keeps an ordered,
de-duplicated list of decoded records plus the document snapshots they
were decoded from. Change batches may arrive on any thread; they are
marshalled onto the event loop that called listen() and applied one batch
at a time by a single consumer task, so the two lists stay in lock-step
and the change handler always sees the post-batch state.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from fireeats.application.dtos.documents import (
    ChangeType,
    DocumentChange,
    DocumentSnapshot,
    ListenerRegistration,
)
from fireeats.application.interfaces.store import Query
from fireeats.domain.entities.serializable import DocumentSerializable
from fireeats.domain.exceptions import IndexOutOfRangeException

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeHandler = Callable[[list[DocumentChange]], None]
ErrorHandler = Callable[[Exception], None]

_STOP = object()


class LocalCollection(Generic[T]):
    """Ordered local snapshot of a live query, decoded into records of type T.

    Lifecycle: listen() opens at most one subscription; stop_listening()
    cancels it but keeps the current snapshot; close() (also run on context
    exit and when the collection is garbage collected) releases the
    subscription for good.
    Both listen() and stop_listening() are idempotent.

    Documents that fail to decode are left out of the snapshot. A
    subscription error is passed to on_error (or logged) and ends that
    subscription; call listen() again to resubscribe.
    """

    def __init__(
        self,
        query: Query,
        record_type: DocumentSerializable[T],
        on_change: ChangeHandler,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._query = query
        self._decode = record_type.from_dict
        self._on_change = on_change
        self._on_error = on_error
        self._items: list[T] = []
        self._documents: list[DocumentSnapshot] = []
        self._registration: ListenerRegistration | None = None
        self._generation = 0
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[Any] | None = None
        self._consumer: asyncio.Task[None] | None = None

    @property
    def query(self) -> Query:
        return self._query

    @property
    def items(self) -> list[T]:
        """Decoded records in query order (copy)."""
        return list(self._items)

    @property
    def documents(self) -> list[DocumentSnapshot]:
        """Snapshots matching items index for index (copy)."""
        return list(self._documents)

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def listening(self) -> bool:
        return self._registration is not None

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        """Return the record at index; raise IndexOutOfRangeException unless 0 <= index < count."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"LocalCollection indices must be integers, not {type(index).__name__}")
        if index < 0 or index >= len(self._items):
            raise IndexOutOfRangeException(index, len(self._items))
        return self._items[index]

    def index_of(self, document: DocumentSnapshot) -> int | None:
        """Position of the document with the same ID, or None. Linear scan."""
        for i, snapshot in enumerate(self._documents):
            if snapshot.id == document.id:
                return i
        return None

    # ---- Subscription lifecycle ----

    def listen(self) -> None:
        """Open the subscription if not already open. Must run inside the event loop."""
        if self._registration is not None:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._generation += 1
        generation = self._generation
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._queue = queue
        self._consumer = loop.create_task(
            _consume(weakref.ref(self), queue, generation),
            name=f"local-collection-{id(self):x}-{generation}",
        )

        def deliver(changes: list[DocumentChange], error: Exception | None) -> None:
            # Store threads land here; hop onto the loop before touching state.
            if loop.is_closed():
                logger.debug("Dropping live query batch: event loop closed")
                return
            loop.call_soon_threadsafe(queue.put_nowait, (changes, error))

        try:
            self._registration = self._query.on_snapshot(deliver)
        except Exception:
            self._generation += 1
            queue.put_nowait(_STOP)
            self._queue = None
            self._consumer = None
            raise
        logger.debug("Live query subscribed (generation %d)", generation)

    def stop_listening(self) -> None:
        """Cancel the subscription if open. The snapshot is kept.

        Safe to call from inside the change handler: the batch being handled
        completes and no later batch of this subscription is delivered.
        """
        registration = self._registration
        if registration is None:
            return
        self._registration = None
        self._generation += 1
        registration.remove()
        queue, self._queue = self._queue, None
        if queue is not None:
            self._post_to_loop(queue, _STOP)
        logger.debug("Live query unsubscribed")

    def close(self) -> None:
        """Release the subscription; same as stop_listening()."""
        self.stop_listening()

    async def wait_for_pending(self) -> None:
        """Wait until every batch delivered so far has been applied and handled."""
        queue = self._queue
        if queue is None:
            return
        # Let batches scheduled with call_soon_threadsafe reach the queue first.
        await asyncio.sleep(0)
        await queue.join()

    def __enter__(self) -> LocalCollection[T]:
        self.listen()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_registration", None) is not None:
            self.stop_listening()

    # ---- Batch processing ----

    def _post_to_loop(self, queue: asyncio.Queue[Any], item: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            queue.put_nowait(item)
        else:
            loop.call_soon_threadsafe(queue.put_nowait, item)

    def _process(self, item: Any, generation: int) -> bool:
        """Handle one queued batch; False ends the consumer."""
        if generation != self._generation:
            return True
        changes, error = item
        if error is not None:
            self._handle_error(error)
            return False
        self._apply(changes)
        try:
            self._on_change(changes)
        except Exception:
            logger.exception("Change handler failed")
        return True

    def _handle_error(self, error: Exception) -> None:
        registration, self._registration = self._registration, None
        self._generation += 1
        self._queue = None
        if registration is not None:
            registration.remove()
        if self._on_error is None:
            logger.warning("Live query failed: %s", error)
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Error handler failed")

    def _apply(self, changes: list[DocumentChange]) -> None:
        """Apply one batch: removals, then additions and modifications in delivered order."""
        for change in changes:
            if change.type is ChangeType.REMOVED:
                index = self.index_of(change.document)
                if index is not None:
                    self._remove_at(index)

        for change in changes:
            if change.type is ChangeType.REMOVED:
                continue
            # A repeated ADDED for a known ID replaces the old entry.
            index = self.index_of(change.document)
            if index is not None:
                self._remove_at(index)
            record = self._decode(change.document.to_dict())
            if record is None:
                logger.debug("Skipping malformed document %s", change.document.id)
                continue
            self._insert(change.new_index, record, change.document)

    def _remove_at(self, index: int) -> None:
        del self._items[index]
        del self._documents[index]

    def _insert(self, position: int, record: T, document: DocumentSnapshot) -> None:
        # Skipped documents make store positions overshoot; clamp to the end.
        if position < 0 or position > len(self._items):
            position = len(self._items)
        self._items.insert(position, record)
        self._documents.insert(position, document)


async def _consume(
    ref: weakref.ReferenceType[LocalCollection[Any]],
    queue: asyncio.Queue[Any],
    generation: int,
) -> None:
    # Holds the collection weakly between batches so an abandoned
    # collection can still be collected and unsubscribed.
    while True:
        item = await queue.get()
        try:
            if item is _STOP or not _dispatch(ref, item, generation):
                _drain(queue)
                return
        finally:
            queue.task_done()


def _dispatch(ref: weakref.ReferenceType[LocalCollection[Any]], item: Any, generation: int) -> bool:
    collection = ref()
    if collection is None:
        return False
    return collection._process(item, generation)


def _drain(queue: asyncio.Queue[Any]) -> None:
    while True:
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            return
        queue.task_done()
