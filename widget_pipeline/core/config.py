"""
Application configuration — Pydantic Settings.

Loads from .env with strict validation. Single source of truth
for all environment-dependent values of the widget pipeline.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    APP_NAME: str = "WidgetPipeline"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # ── HTTP server ──────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:5000", "http://127.0.0.1:5000"]

    # ── Plugin gateway ───────────────────────────────────────────
    PLUGIN_API_BASE_URL: str = "http://127.0.0.1:5000/api"
    PLUGIN_API_AUTH_TYPE: str = "bearer"
    PLUGIN_API_TOKEN: str = ""
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # ── Rate limiting ────────────────────────────────────────────
    RATE_LIMIT_COOLDOWN_SECONDS: float = 60.0
    RATE_LIMIT_RETRY_PADDING_MS: int = 1000
    BUSINESS_RATE_LIMIT_RETRY_SECONDS: float = 65.0
    RATE_LIMIT_SIGNATURES: List[str] = ["rate limit", "429", "too many requests"]

    # ── Context resolution ───────────────────────────────────────
    ENTITY_COLLECTIONS: List[str] = ["clients", "contracts"]

    # ── Presentation ─────────────────────────────────────────────
    TABLE_PREVIEW_ROWS: int = 10
    LIST_PREVIEW_ITEMS: int = 10
    DEFAULT_GROUP_LIMIT: int = 10

    # ── Refresh-all staggering ───────────────────────────────────
    REFRESH_BATCH_SIZE: int = 3
    REFRESH_BATCH_DELAY_SECONDS: float = 2.0
    REFRESH_WIDGET_DELAY_SECONDS: float = 0.2

    # ── Widget definitions ───────────────────────────────────────
    WIDGETS_FILE: str = str(_PACKAGE_DIR / "config" / "widgets.yml")

    # ── Logging ──────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ── Derived values ───────────────────────────────────────────

    @property
    def retry_padding_seconds(self) -> float:
        return self.RATE_LIMIT_RETRY_PADDING_MS / 1000.0


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
