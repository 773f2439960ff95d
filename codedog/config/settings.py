"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion. Every variable
is prefixed with CODEDOG_ (e.g. CODEDOG_BARK_DELAY_MS=3000).

The controller reads size, idle_timeout_ms, enable_bark, bark_delay_ms and
death_cooldown_ms on each evaluation of the rule that uses them; swapping
the settings object never touches timers already in flight.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codedog.config.constants import DOG


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CODEDOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Presentation
    size: int = Field(
        default=DOG.DEFAULT_SIZE_PX, ge=16, le=1024, description="Sprite height in pixels"
    )

    # Controller behaviour
    idle_timeout_ms: int = Field(
        default=DOG.DEFAULT_IDLE_TIMEOUT_MS,
        ge=0,
        description="Inactivity before idle blinks may start",
    )
    enable_bark: bool = Field(default=True, description="Bark at errors and warnings")
    bark_delay_ms: int = Field(
        default=DOG.DEFAULT_BARK_DELAY_MS,
        ge=0,
        description="Delay before a diagnostic bark is confirmed",
    )
    death_cooldown_ms: int = Field(
        default=DOG.DEFAULT_DEATH_COOLDOWN_MS,
        ge=0,
        description="How long the death animation is held after a failed task",
    )
    idle_blink_probability: float = Field(
        default=DOG.IDLE_BLINK_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Chance per idle tick of playing a blink",
    )

    # Assets
    media_path: str = Field(
        default="media", description="Directory holding one folder of frames per animation"
    )
    frame_extension: str = Field(default=".png", description="Frame file extension")

    # API Configuration
    api_host: str = Field(default="127.0.0.1", description="API bind host")
    api_port: int = Field(default=8765, ge=1024, le=65535, description="API port")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Emit JSON logs instead of console output")

    @field_validator("frame_extension", mode="before")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Lower-case the extension and ensure a leading dot."""
        v = str(v).strip().lower()
        if not v:
            raise ValueError("frame_extension must not be empty")
        if not v.startswith("."):
            v = "." + v
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
