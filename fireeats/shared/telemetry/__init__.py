"""Shared telemetry: logging setup."""

from fireeats.shared.telemetry.logging import setup_logging

__all__ = [
    "setup_logging",
]
