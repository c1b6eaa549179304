"""Configuration loaded from DEALER_CREDIT_* environment variables"""

from __future__ import annotations

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings; blank variables keep the defaults"""

    model_config = SettingsConfigDict(
        env_prefix="DEALER_CREDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    log_level: str = "INFO"
    log_file: str | None = None

    host: str = "127.0.0.1"
    port: int = Field(8000, ge=0, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @field_validator("log_file", "host", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: object, info: ValidationInfo) -> object:
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v


def load_settings() -> Settings:
    return Settings()
