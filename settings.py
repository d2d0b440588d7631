"""Icon Forge configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from ICON_FORGE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ICON_FORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("ICON_FORGE_PORT", "PORT"))
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Icons
    cache_max_age: int = 86400
    template_path: Optional[str] = None  # embedded template when unset

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level must be a logging level name, got '{value}'")
        return level

    @field_validator("cache_max_age")
    @classmethod
    def validate_cache_max_age(cls, value: int) -> int:
        if value < 0:
            raise ValueError("cache_max_age must not be negative")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
