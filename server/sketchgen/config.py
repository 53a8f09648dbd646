# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server configuration sourced from environment variables.

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env")

    # ── Generation provider ──────────────────────────────────────────────────
    gemini_api_key: SecretStr = SecretStr("")  # empty = not configured
    gemini_model: str = "gemini-2.5-flash"

    # ── Rate limiting ────────────────────────────────────────────────────────
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 10

    # ── Limits ───────────────────────────────────────────────────────────────
    prompt_min_length: int = 3
    prompt_max_length: int = 500

    # ── HTTP ─────────────────────────────────────────────────────────────────
    allowed_origins: str = ""  # comma-separated; empty = allow all
    environment: str = "development"

    # ── Observability ────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True
    otel_exporter: str = ""  # "console" or empty


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
