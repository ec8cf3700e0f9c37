"""Decode contract shared by records mirrored from the document store."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


class DocumentSerializable(Protocol[T_co]):
    """A record type that can be built from a stored field map.

    from_dict must be total-or-nothing: return None rather than a partially
    populated record when any field is missing or mistyped.
    """

    def from_dict(self, data: dict[str, Any], /) -> T_co | None: ...
