"""Service configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific fields (Firestore credentials) are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings loaded from environment and .env.

    All settings are optional with defaults; validate_backend rejects an
    unknown database_backend and a Firestore backend without credentials.
    """

    # App
    app_name: str = "fireeats"
    app_version: str = "1.0.0"
    debug: bool = False

    # Document store: "memory" (in-process, non-durable) or "firestore" (REST API)
    database_backend: str = "memory"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Local emulator (host:port); credentials are not needed when set.
    firestore_emulator_host: str | None = None
    firebase_project_id: str | None = None
    # Seconds between watch polls for live queries against Firestore.
    firestore_watch_interval_seconds: float = 2.0
    firestore_http_timeout_seconds: float = 30.0

    # Queries and transactions
    query_result_limit: int = 50
    transaction_max_attempts: int = 5

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Rate limiting (slowapi limit string) for write endpoints.
    write_rate_limit: str = "60/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate the document store backend and its credentials.

        - memory: nothing required.
        - firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required,
          or FIRESTORE_EMULATOR_HOST together with FIREBASE_PROJECT_ID.
        """
        if self.database_backend == "firestore":
            if self.firestore_emulator_host:
                if not self.firebase_project_id:
                    raise ValueError(
                        "FIRESTORE_EMULATOR_HOST requires FIREBASE_PROJECT_ID to be set."
                    )
            else:
                has_key = (
                    self.firebase_service_account_key
                    and self.firebase_service_account_key.get_secret_value()
                )
                if not has_key and not self.firebase_service_account_path:
                    raise ValueError(
                        "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                        "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                    )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'memory' or 'firestore', got: {self.database_backend!r}"
            )
        if self.query_result_limit < 1:
            raise ValueError("query_result_limit must be at least 1")
        if self.transaction_max_attempts < 1:
            raise ValueError("transaction_max_attempts must be at least 1")
        if self.firestore_watch_interval_seconds <= 0:
            raise ValueError("firestore_watch_interval_seconds must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached service settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
