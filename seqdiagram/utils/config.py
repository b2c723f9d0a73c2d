"""Application configuration."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from seqdiagram.schemas import Theme


class Settings(BaseSettings):
    """Runtime settings loaded from .env and environment variables."""

    model_config = SettingsConfigDict(env_prefix="SEQDIAGRAM_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    default_theme: Theme = Theme.SIMPLE
    validation_cache_size: int = Field(default=1000, gt=0)
    validation_cache_ttl_seconds: float = Field(default=300.0, gt=0)
    render_cache_size: int = Field(default=50, gt=0)
    render_cache_ttl_seconds: float = Field(default=300.0, gt=0)


settings = Settings()
