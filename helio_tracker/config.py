"""Helio donation tracker configuration."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings, read once at startup and frozen afterwards."""

    port: int = 3000
    currency: str = "USD"

    # Empty secret = unsecured mode (every signature accepted)
    helio_webhook_secret: str = ""

    # Widget is a read-only iframe; lock to your domain if you prefer
    cors_origin: str = "*"

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore", "frozen": True}

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("currency must not be empty")
        return value

    @property
    def unsecured(self) -> bool:
        return not self.helio_webhook_secret


def load_settings() -> Settings:
    """Read settings from the environment (and .env, if present)."""
    return Settings()
