"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = False

    @field_validator("test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake}")
        return v


class LavalinkSettings(BaseModel):
    """Audio engine (Lavalink v4 node) configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    rest_url: str = Field(
        default="http://127.0.0.1:2333",
        validation_alias=AliasChoices("rest_url", "rest", "rest_host"),
    )
    ws_url: str = Field(
        default="ws://127.0.0.1:2333/v4/websocket",
        validation_alias=AliasChoices("ws_url", "ws", "ws_host"),
    )
    password: SecretStr = Field(
        default=SecretStr("youshallnotpass"),
        validation_alias=AliasChoices("password", "lavalink_password"),
    )
    client_name: str = Field(default="discord-autoqueue", min_length=1)
    search_prefix: str = Field(default="ytsearch", min_length=1)
    request_timeout_s: float = Field(default=10.0, gt=0.0, le=120.0)
    reconnect_base_delay_s: float = Field(default=1.0, gt=0.0, le=60.0)
    reconnect_max_delay_s: float = Field(default=60.0, gt=0.0, le=600.0)

    @field_validator("rest_url")
    @classmethod
    def validate_rest_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Lavalink REST URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("ws_url")
    @classmethod
    def validate_ws_url(cls, v: str) -> str:
        if not v.startswith(("ws://", "wss://")):
            raise ValueError("Lavalink websocket URL must start with ws:// or wss://")
        return v


class PlaybackSettings(BaseModel):
    """Queue and auto-advance configuration."""

    model_config = SettingsConfigDict(frozen=True)

    grace_ms: int = Field(default=1000, ge=0, le=60_000)
    fallback_duration_ms: int = Field(default=180_000, ge=1000)
    voice_ready_timeout_s: float = Field(default=5.0, gt=0.0, le=60.0)
    voice_ready_poll_s: float = Field(default=0.25, gt=0.0, le=5.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX, etc. (nested with delimiter)
    - LAVALINK__REST_URL, LAVALINK__WS_URL, LAVALINK__PASSWORD
    - PLAYBACK__GRACE_MS, PLAYBACK__VOICE_READY_TIMEOUT_S
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    lavalink: LavalinkSettings = Field(default_factory=LavalinkSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
