"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). With FIRESTORE_EMULATOR_HOST set,
connects to the local emulator without credentials.
"""

import json
import logging
from pathlib import Path

from fireeats.core.config import Settings, get_settings
from fireeats.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict(settings: Settings) -> dict | None:
    """Return service account dict from env key or file path."""
    key_json = settings.firebase_service_account_key.get_secret_value() if settings.firebase_service_account_key else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve() if not Path(path).is_absolute() else Path(path)
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firestore(settings: Settings | None = None) -> FirestoreRESTClient | None:
    """Initialize the Firestore client (REST API + google-auth).

    Idempotent if already initialized. On missing or malformed credentials,
    logs the problem and returns None so the caller can decide whether the
    service may start without Firestore.
    """
    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client
    settings = settings or get_settings()
    options = {
        "watch_interval": settings.firestore_watch_interval_seconds,
        "timeout": settings.firestore_http_timeout_seconds,
    }
    try:
        if settings.firestore_emulator_host:
            _firestore_client = FirestoreRESTClient(
                settings.firebase_project_id,
                None,
                base_url=f"http://{settings.firestore_emulator_host}/v1",
                **options,
            )
            logger.info("Using Firestore emulator at %s", settings.firestore_emulator_host)
            return _firestore_client

        key_dict = _load_key_dict(settings)
        if not key_dict:
            return None

        project_id = key_dict.get("project_id") or settings.firebase_project_id
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return None

        cred = _get_credentials(key_dict)
        _firestore_client = FirestoreRESTClient(project_id, cred, **options)
        logger.info("Firestore client initialized for project %s", project_id)
        return _firestore_client
    except (ValueError, OSError):
        logger.exception("Firestore initialization failed")
        return None


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


async def close_firestore() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
