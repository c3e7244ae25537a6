"""Environment configuration and validation.

Settings are loaded from environment variables (optionally via a local `.env` file). Durations
are validated as positive so the session purge and the loading back-off always make progress.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: str = Field(alias="TELEGRAM_BOT_TOKEN")

    card_file_path: Path = Field(default=Path("cards.tsv"), alias="CARD_FILE_PATH")
    google_sheet_id: str | None = Field(default=None, alias="GOOGLE_SHEET_ID")
    catalog_timeout_s: float = Field(default=30.0, alias="CATALOG_TIMEOUT_S")

    loading_wait_s: float = Field(default=1.0, alias="LOADING_WAIT_S")
    session_ttl_hours: float = Field(default=24.0, alias="SESSION_TTL_HOURS")
    purge_interval_hours: float = Field(default=1.0, alias="PURGE_INTERVAL_HOURS")

    # JSON list, e.g. ADMIN_USER_IDS=[123456789]
    admin_user_ids: list[int] = Field(default_factory=list, alias="ADMIN_USER_IDS")
    delete_reaction: str = Field(default="👎", alias="DELETE_REACTION")

    @field_validator(
        "catalog_timeout_s",
        "loading_wait_s",
        "session_ttl_hours",
        "purge_interval_hours",
    )
    @classmethod
    def validate_positive(cls, value: float) -> float:
        """Reject zero and negative durations."""

        if value <= 0:
            raise ValueError("must be a positive number")
        return value

    @field_validator("google_sheet_id")
    @classmethod
    def blank_sheet_id_is_none(cls, value: str | None) -> str | None:
        return (value or "").strip() or None

    @model_validator(mode="after")
    def validate_purge_window(self) -> Settings:
        """The purge interval must not exceed the session TTL, or expiry would lag a whole TTL."""

        if self.purge_interval_hours > self.session_ttl_hours:
            raise ValueError("PURGE_INTERVAL_HOURS must be <= SESSION_TTL_HOURS")
        return self

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(hours=self.session_ttl_hours)

    @property
    def purge_interval(self) -> timedelta:
        return timedelta(hours=self.purge_interval_hours)


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
