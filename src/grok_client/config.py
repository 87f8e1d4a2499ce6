"""Client configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_IMAGE_GENERATION_COUNT, DEFAULT_MODEL

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cookies: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("GROK_COOKIES", "TWITTER_COOKIE", "cookies"),
    )
    cookies_file: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("GROK_COOKIES_FILE", "cookies_file"),
    )
    lang: str = Field(
        default="en-US",
        validation_alias=AliasChoices("GROK_LANG", "lang"),
    )
    request_timeout: float = Field(
        default=120.0,
        validation_alias=AliasChoices("GROK_TIMEOUT", "timeout"),
        ge=1,
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        validation_alias=AliasChoices("GROK_DEFAULT_MODEL", "default_model"),
    )
    image_generation_count: int = Field(
        default=DEFAULT_IMAGE_GENERATION_COUNT,
        ge=0,
        validation_alias=AliasChoices(
            "GROK_IMAGE_GENERATION_COUNT",
            "image_generation_count",
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["Settings", "get_settings"]
