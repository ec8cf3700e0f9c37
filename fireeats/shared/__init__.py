"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from fireeats.shared.utils import (
    ensure_utc,
    generate_document_id,
    to_rfc3339,
    utc_now,
)

__all__ = [
    "ensure_utc",
    "generate_document_id",
    "to_rfc3339",
    "utc_now",
]
