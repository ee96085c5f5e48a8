"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinefeed.constants import HTTPX_TIMEOUT

# Values shipped in example .env files; treated as "not configured"
PLACEHOLDER_CREDENTIALS = frozenset({
    "your_tmdb_api_key_here",
    "your_tmdb_access_token_here",
})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "CineFeed"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None

    # TMDB (v3 API key or v4 read access token)
    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base: str = "https://image.tmdb.org/t/p"
    tmdb_language: str = "en-US"

    @field_validator("tmdb_api_key")
    @classmethod
    def normalize_api_key(cls, v: str) -> str:
        """Treat blank and placeholder keys as missing."""
        v = v.strip()
        if v in PLACEHOLDER_CREDENTIALS:
            return ""
        return v

    # HTTP
    http_timeout: float = HTTPX_TIMEOUT

    # Redis (optional, backs the profile store)
    redis_url: RedisDsn | None = None

    @property
    def has_tmdb(self) -> bool:
        """Check if TMDB credentials are available."""
        return bool(self.tmdb_api_key)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
