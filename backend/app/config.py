"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Settings are frozen: built once at startup, passed explicitly to every stage
    - The .env override file is read only outside production
    - get_settings() is cached (lru_cache): single instance per process
    - Missing optional values fall back to defaults, nothing here raises for absence

Design Decisions:
    - Comma-separated origin lists kept as raw strings, split by cors_origins
      (pydantic-settings would otherwise expect JSON for list fields)
    - NODE_ENV / UV_THREADPOOL_SIZE / npm_package_version accepted as aliases so
      existing deployment environments keep working
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
PRODUCTION = "production"
DEFAULT_SERVICE_ACCOUNT_PATH = (
    Path(__file__).resolve().parent.parent / "serviceAccountKey.json"
)
DEFAULT_ALLOWED_ORIGINS = "https://pilves.github.io,https://api.chaidla.ee"
DEFAULT_DEV_ALLOWED_ORIGINS = "http://localhost:5173,http://localhost:5000"


class Settings(BaseSettings):
    """Process configuration from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False, frozen=True, extra="ignore",
    )

    environment: str = Field(
        "development", validation_alias=AliasChoices("environment", "node_env"),
    )

    # Listener
    host: str = "0.0.0.0"
    port: int = 5000

    # Firebase credentials
    firebase_service_account: str | None = None
    service_account_path: Path = DEFAULT_SERVICE_ACCOUNT_PATH

    # CORS
    allowed_origins: str | None = None
    dev_allowed_origins: str | None = None

    # Runtime hints
    threadpool_size: int | None = Field(
        None,
        validation_alias=AliasChoices("threadpool_size", "uv_threadpool_size"),
    )
    max_memory_mb: int | None = None

    version: str = Field(
        "1.0.0", validation_alias=AliasChoices("app_version", "npm_package_version", "version"),
    )

    # Request parsing
    max_body_bytes: int = 100 * 1024

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @property
    def cors_origins(self) -> list[str]:
        """Resolved origin allow-list for the current mode."""
        if self.is_production:
            raw = self.allowed_origins or DEFAULT_ALLOWED_ORIGINS
        else:
            raw = self.dev_allowed_origins or DEFAULT_DEV_ALLOWED_ORIGINS
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Read settings from the environment, plus .env outside production."""
    settings = Settings(_env_file=None)
    if settings.is_production:
        return settings
    return Settings(_env_file=ENV_FILE)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
