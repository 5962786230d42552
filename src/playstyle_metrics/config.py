"""Settings for the data fetcher and tool server, loaded from the environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variables are read with the PLAYSTYLE_ prefix."""

    model_config = SettingsConfigDict(env_prefix="PLAYSTYLE_")

    # Metrics API
    API_BASE_URL: str = "http://localhost:3000/api"
    API_VERSION: str = "v1"
    API_TIMEOUT: float = 30.0  # seconds

    # File cache for fetched payloads
    CACHE_ENABLED: bool = False
    CACHE_TTL: int = 60 * 60  # 1 hour
    CACHE_DIR: Path = Path.home() / ".cache" / "playstyle-metrics"

    # Local dataset; when set the server reads it instead of the API
    DATA_FILE: Optional[Path] = None

    DEFAULT_LEAGUE: str = "developer-league"
    SIGNIFICANCE_THRESHOLD: float = 20.0  # percent

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
