"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, List, Optional

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_HIVE_NODES = [
    "https://api.hive.blog",
    "https://api.openhive.network",
    "https://api.deathwing.me",
    "https://hive-api.arcange.eu",
    "https://anyx.io",
    "https://techcoderx.com",
]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: Optional[str] = Field(
        default=None, alias="TELEGRAM_BOT_TOKEN"
    )

    hive_nodes: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_HIVE_NODES),
        alias="HIVE_NODES",
    )
    hive_request_timeout: float = Field(
        default=15.0,
        alias="HIVE_REQUEST_TIMEOUT",
        gt=0,
        le=120,
    )

    reputation_api_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="REPUTATION_API_URL",
    )

    history_window_days: int = Field(
        default=30,
        alias="HISTORY_WINDOW_DAYS",
        ge=1,
        le=365,
    )
    reward_app_account: str = Field(default="reward.app", alias="REWARD_APP_ACCOUNT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("hive_nodes", mode="before")
    @classmethod
    def _parse_nodes(cls, value: Any) -> List[str]:
        if value in (None, "", []):
            return list(DEFAULT_HIVE_NODES)
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if str(v).strip()]
        return [str(value)]


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached Settings instance, raising a helpful message on failure."""
    try:
        return Settings()
    except (
        ValidationError
    ) as exc:  # pragma: no cover - configuration failure visible on boot
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["DEFAULT_HIVE_NODES", "Settings", "load_settings"]
