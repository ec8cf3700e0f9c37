"""Review domain record (one document in a restaurant's ratings subcollection)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fireeats.domain.entities._fields import (
    any_missing,
    read_datetime,
    read_int,
    read_str,
)


@dataclass(frozen=True)
class Review:
    """Decoded review document.

    Attributes:
        rating: Star rating, 1-5.
        user_id: Author identity from the identity provider (stored as userId).
        username: Author display name (stored as userName).
        text: Free-text body.
        date: Submission time, UTC (stored as timestamp).
    """

    rating: int
    user_id: str
    username: str
    text: str
    date: datetime

    def to_dict(self) -> dict[str, Any]:
        """Encode to the stored field map."""
        return {
            "rating": self.rating,
            "userId": self.user_id,
            "userName": self.username,
            "text": self.text,
            "timestamp": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Review | None:
        """Decode a stored field map; None if any field is missing or mistyped."""
        rating = read_int(data, "rating")
        user_id = read_str(data, "userId")
        username = read_str(data, "userName")
        text = read_str(data, "text")
        date = read_datetime(data, "timestamp")
        if any_missing(rating, user_id, username, text, date):
            return None
        return cls(rating=rating, user_id=user_id, username=username, text=text, date=date)
