"""Typed field readers for decoding schema-less documents.

Each reader returns _MISSING when the key is absent or the value has the
wrong type, so decoders can stay total-or-nothing.
"""

from datetime import datetime
from typing import Any, Final

from fireeats.shared.utils.datetime import ensure_utc

_MISSING: Final = object()


def read_str(data: dict[str, Any], key: str) -> Any:
    value = data.get(key, _MISSING)
    return value if isinstance(value, str) else _MISSING


def read_int(data: dict[str, Any], key: str) -> Any:
    value = data.get(key, _MISSING)
    # bool is an int subclass; a stored true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        return _MISSING
    return value


def read_float(data: dict[str, Any], key: str) -> Any:
    value = data.get(key, _MISSING)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _MISSING
    return float(value)


def read_datetime(data: dict[str, Any], key: str) -> Any:
    value = data.get(key, _MISSING)
    if not isinstance(value, datetime):
        return _MISSING
    return ensure_utc(value)


def any_missing(*values: Any) -> bool:
    return any(v is _MISSING for v in values)
