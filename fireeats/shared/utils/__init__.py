"""Shared utilities: datetime and ID generators."""

from fireeats.shared.utils.datetime import ensure_utc, to_rfc3339, utc_now
from fireeats.shared.utils.generators import generate_document_id

__all__ = [
    "ensure_utc",
    "generate_document_id",
    "to_rfc3339",
    "utc_now",
]
