"""
postman-graph Configuration

Settings are loaded from:
1. Environment variables (prefixed with POSTMAN_GRAPH_)
2. ~/.postman-graph/.env file

Key settings:
- POSTMAN_GRAPH_API_KEY: Postman API key sent with every request
- POSTMAN_GRAPH_BASE_URL: API base URL (default: https://api.getpostman.com)
- POSTMAN_GRAPH_DETAIL_LIMIT: How many collections get a detail fetch (default: 5)
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".postman-graph"
ENV_FILE = CONFIG_DIR / ".env"


class Settings(BaseSettings):
    """postman-graph configuration settings."""

    api_key: str | None = None
    base_url: str = "https://api.getpostman.com"
    timeout: float = Field(default=30.0, gt=0)
    detail_limit: int = Field(default=5, ge=0)
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="POSTMAN_GRAPH_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _strip_key(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings."""
    return Settings()


def reload_settings() -> Settings:
    """Clear the cached settings and reload from the environment."""
    get_settings.cache_clear()
    return get_settings()
