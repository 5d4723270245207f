"""Application settings read from the environment and an optional ``.env``."""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from core.exceptions import ConfigurationError
from myhome import presets

DEFAULT_API_BASE_URL = "https://my-home-production.up.railway.app/api/v1"


class Settings(BaseSettings):
    API_BASE_URL: str = DEFAULT_API_BASE_URL
    REQUEST_TIMEOUT: float = 15.0
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["standard", "json"] = "standard"
    SESSION_FILE: str = "session_data.json"
    LANGUAGE: Literal["es", "en"] = "es"
    PROGRAM_NAME: str = presets.DEFAULT_PROGRAM_NAME
    MIN_DOWN_PAYMENT_PCT: Decimal = presets.MIN_DOWN_PAYMENT_PCT
    MIN_TERM_MONTHS: int = presets.MIN_TERM_MONTHS
    MAX_TERM_MONTHS: int = presets.MAX_TERM_MONTHS
    CANCEL_POLICY: Literal["save", "discard"] = "save"

    # Read as MYHOME_<FIELD>, e.g. MYHOME_API_BASE_URL.
    model_config = {"env_prefix": "MYHOME_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("API_BASE_URL")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("REQUEST_TIMEOUT")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        return value

    @field_validator("MIN_DOWN_PAYMENT_PCT")
    @classmethod
    def _fraction(cls, value: Decimal) -> Decimal:
        if not Decimal("0") <= value < Decimal("1"):
            raise ValueError("MIN_DOWN_PAYMENT_PCT must be a fraction between 0 and 1")
        return value

    @model_validator(mode="after")
    def _term_bounds(self):
        if not 0 < self.MIN_TERM_MONTHS <= self.MAX_TERM_MONTHS:
            raise ValueError("term bounds must satisfy 0 < MIN_TERM_MONTHS <= MAX_TERM_MONTHS")
        return self


def load_settings(**overrides) -> Settings:
    """Build settings, reporting invalid values as ``ConfigurationError``."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
