"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (document store,
WebSocket manager).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from fireeats.application.interfaces.store import DocumentStore
from fireeats.core.config import Settings, get_settings
from fireeats.domain.exceptions import StoreNotConfiguredException

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> DocumentStore:
    """Build the document store for settings.database_backend.

    Raises:
        StoreNotConfiguredException: If the Firestore client could not be initialized.
    """
    if settings.database_backend == "firestore":
        from fireeats.infrastructure.firebase import init_firestore

        client = init_firestore(settings)
        if client is None:
            raise StoreNotConfiguredException()
        return client

    from fireeats.infrastructure.memory import MemoryDocumentStore

    logger.info("Using in-memory document store (data is not persisted)")
    return MemoryDocumentStore()


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: document store, WebSocket manager. Shutdown closes the
    store, which also stops any live queries still open.
    """
    settings = get_settings()

    # ---- Startup ----
    from fireeats.api.websocket import ConnectionManager

    app.state.store = create_store(settings)
    app.state.ws_manager = ConnectionManager()
    logger.info("%s %s started (%s backend)", settings.app_name, settings.app_version, settings.database_backend)

    yield

    # ---- Shutdown ----
    store = getattr(app.state, "store", None)
    if store is not None:
        if settings.database_backend == "firestore":
            from fireeats.infrastructure.firebase import close_firestore

            await close_firestore()
        else:
            await store.aclose()
        app.state.store = None
        logger.info("Document store closed")
