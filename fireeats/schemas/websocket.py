"""WebSocket API schemas (live query messages)."""

from typing import Any

from pydantic import BaseModel, Field


class ChangeMessage(BaseModel):
    """One document change applied to a live query's result set."""

    type: str = Field(..., description="'added', 'modified' or 'removed'")
    id: str = Field(..., description="Document ID")
    old_index: int = Field(..., description="Position before the batch, -1 if none")
    new_index: int = Field(..., description="Position after the batch, -1 if none")
    data: dict[str, Any] | None = Field(
        default=None, description="Decoded record; null for removals and malformed documents"
    )


class SnapshotMessage(BaseModel):
    """A change batch plus the mirrored collection's size after applying it."""

    changes: list[ChangeMessage]
    count: int


class ErrorMessage(BaseModel):
    """Sent once when the live query fails; the socket is closed afterwards."""

    error: str
    message: str
