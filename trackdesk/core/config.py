"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY, ENVELOPE_PASSPHRASE)
are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required_and_store (secret_key, envelope_passphrase, and the
    Firebase connection when store_backend is 'firebase').
    """

    # App
    app_name: str = "trackdesk"
    app_version: str = "1.0.0"
    debug: bool = False

    # Realtime store: "firebase" (Realtime Database REST) or "memory" (in-process tree)
    store_backend: str = "firebase"
    firebase_database_url: str = ""
    # Firebase service account: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    http_timeout_seconds: float = 30.0
    # How long a request waits for the first snapshot of a partition
    snapshot_timeout_seconds: float = 10.0
    # Seconds an unused live cache stays subscribed; 0 closes it with its last user
    cache_idle_seconds: float = 0.0

    # Partition routing
    shared_admin_id: str = "admin"
    shared_admin_collections: str = "tickets,renewals,work,bills,customForms,formEntries"
    key_substitute: str = "_"

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours
    # Passphrase for field envelopes (one key for the whole application)
    envelope_passphrase: SecretStr = SecretStr("")

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:9002"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def shared_collections(self) -> frozenset[str]:
        """Collections every admin reads from the shared admin partition."""
        return frozenset(
            c.strip() for c in self.shared_admin_collections.split(",") if c.strip()
        )

    @model_validator(mode="after")
    def validate_required_and_store(self) -> "Settings":
        """Validate required env and store backend.

        - Firebase: FIREBASE_DATABASE_URL and FIREBASE_SERVICE_ACCOUNT_KEY or
          FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Memory: no connection settings.
        """
        if self.store_backend == "firebase":
            if not self.firebase_database_url:
                raise ValueError(
                    "FIREBASE_DATABASE_URL is required when store_backend is 'firebase' "
                    "(e.g. https://<project>-default-rtdb.firebaseio.com)."
                )
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When store_backend is 'firebase', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.store_backend != "memory":
            raise ValueError(
                f"store_backend must be 'firebase' or 'memory', got: {self.store_backend!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if not self.envelope_passphrase.get_secret_value():
            raise ValueError(
                "ENVELOPE_PASSPHRASE is required to read and write encrypted fields."
            )
        if len(self.key_substitute) != 1 or self.key_substitute in ".#$[]/":
            raise ValueError(
                "KEY_SUBSTITUTE must be a single character that the store accepts in keys."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
