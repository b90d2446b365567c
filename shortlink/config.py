"""Configuration management for the shortlink service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from shortlink.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    length = settings.SHORT_CODE_LENGTH

**Step 3 — Override in tests**::
    settings = Settings(SHORT_CODE_LENGTH=4, BASE_URL="http://test")

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables override defaults automatically (``PORT=9000``).
- ``CORS_ALLOWED_ORIGINS`` is read as a JSON list from the environment.
- Invalid values raise ValidationError at startup, not at request time.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings", "DEFAULT_ALPHABET"]

import string
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortlink.enums import CollisionPolicy

DEFAULT_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits


class Settings(BaseSettings):
    APP_NAME: str = "shortlink"
    APP_ENV: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = Field(8080, ge=1, le=65535)
    BASE_URL: str = "http://localhost:8080"

    # Short code generation
    SHORT_CODE_LENGTH: int = Field(6, ge=1)
    SHORT_CODE_ALPHABET: str = DEFAULT_ALPHABET
    MAX_COLLISION_RETRIES: int = Field(10, ge=1)
    COLLISION_POLICY: CollisionPolicy = CollisionPolicy.FAIL
    MAX_CODE_LENGTH: int = Field(12, ge=1)

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("SHORT_CODE_ALPHABET")
    @classmethod
    def validate_alphabet(cls, v: str) -> str:
        if len(set(v)) != len(v):
            raise ValueError("Short code alphabet must not repeat characters")
        if len(v) < 2:
            raise ValueError("Short code alphabet needs at least 2 characters")
        return v

    @field_validator("BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def short_url_for(self, short_code: str) -> str:
        return f"{self.BASE_URL}/{short_code}"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
