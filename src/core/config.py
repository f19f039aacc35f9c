"""Application settings.

Values come from the process environment, then from an env file chosen by
``ENVIRONMENT`` (``.env.dev`` in development, ``.env.prod`` in production,
none under test).
"""

import json
import os
from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_FILES: dict[str, str | None] = {
    "development": ".env.dev",
    "production": ".env.prod",
    "test": None,
}


def _parse_origins(value: object) -> list[str]:
    """Accept a list, a JSON array string or a comma separated string."""
    if isinstance(value, list):
        return [str(origin).strip() for origin in value]
    if not isinstance(value, str):
        raise ValueError("CORS_ORIGINS must be a list or a string")
    text = value.strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError("CORS_ORIGINS is not a valid JSON array") from exc
        if not isinstance(parsed, list):
            raise ValueError("CORS_ORIGINS JSON must be an array")
        return [str(origin).strip() for origin in parsed]
    return [origin.strip() for origin in text.split(",") if origin.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_NAME: str = "VoiceOrder"
    ENVIRONMENT: str = "development"

    CORS_ORIGINS: list[str] | str = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    ALLOW_CREDENTIALS: bool = True

    # Field extractor model
    LLM_PROVIDER: Literal["openai", "azure_openai", "gemini"] = "openai"
    EXTRACTION_MODEL: str = "gpt-4o-mini"
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_API_VERSION: str | None = "2024-08-01-preview"
    GEMINI_API_KEY: str | None = None

    # Recognition pipeline; a timeout of 0 disables it
    EXTRACTION_CACHE_MAX_ENTRIES: int = 1000
    MIN_TEXT_LENGTH: int = 2
    EXTRACTION_TIMEOUT_SECONDS: float = 60.0
    LOOKUP_TIMEOUT_SECONDS: float = 10.0

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v: object) -> list[str]:
        return _parse_origins(v)

    @field_validator(
        "EXTRACTION_CACHE_MAX_ENTRIES",
        "MIN_TEXT_LENGTH",
        "EXTRACTION_TIMEOUT_SECONDS",
        "LOOKUP_TIMEOUT_SECONDS",
    )
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @model_validator(mode="after")
    def _no_wildcard_with_credentials(self) -> "Settings":
        origins = _parse_origins(self.CORS_ORIGINS)
        if self.ALLOW_CREDENTIALS and "*" in origins:
            raise ValueError(
                "CORS_ORIGINS may not contain '*' while ALLOW_CREDENTIALS is enabled"
            )
        self.CORS_ORIGINS = origins
        return self


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env not in _ENV_FILES:
        raise ValueError("ENVIRONMENT must be 'development', 'production', or 'test'")
    # `_env_file` is a runtime-only pydantic-settings argument
    return Settings(_env_file=_ENV_FILES[env])  # type: ignore[call-arg]
