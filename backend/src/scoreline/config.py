"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (repository root, above backend/)
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Supabase (match, h2h_records, lineups live in sports_data) ---
    supabase_url: str
    supabase_service_role_key: str
    supabase_schema: str = "sports_data"

    # --- Highlightly sports-data API ---
    # Optional at startup: a missing key only fails requests that miss the cache.
    highlightly_key: str | None = None
    highlightly_base_url: str = "https://sports.highlightly.net"
    upstream_timeout_s: float = 8.0
    upstream_retries: int = 2

    # --- App ---
    app_env: str = "development"
    log_level: str = "INFO"
    cors_allow_origins: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
