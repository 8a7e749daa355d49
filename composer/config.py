"""Configuration management for the composition engine.

Loads and validates environment variables using Pydantic settings.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from composer.exceptions import ConfigurationError
from composer.timing import STANDARD_BEAT_LENGTH


class ComposerConfig(BaseSettings):
    """Composition engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    env: Literal["development", "production", "test"] = Field(
        default="development", alias="COMPOSER_ENV"
    )

    # Timing
    ticks_per_beat: int = Field(
        default=STANDARD_BEAT_LENGTH, alias="COMPOSER_TICKS_PER_BEAT", ge=1, le=100_000
    )

    # Seed used when compose() is called without one (None = random)
    default_seed: Optional[int] = Field(default=None, alias="COMPOSER_SEED")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", alias="COMPOSER_LOG_LEVEL"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v


@dataclass(frozen=True)
class ComposerOptions:
    """Options fixed at Composer construction and threaded through every context.

    Attributes:
        ticks_per_beat: Number of ticks per beat
    """

    ticks_per_beat: int = STANDARD_BEAT_LENGTH

    def __post_init__(self) -> None:
        """Validate options after initialization."""
        if self.ticks_per_beat <= 0:
            raise ConfigurationError(
                f"Invalid ticks_per_beat: {self.ticks_per_beat} (must be positive)"
            )

    @classmethod
    def from_config(cls, config: Optional["ComposerConfig"] = None) -> "ComposerOptions":
        """Create options from settings.

        Args:
            config: Settings to read (defaults to the global configuration)

        Returns:
            ComposerOptions with configured defaults
        """
        config = config or get_config()
        return cls(ticks_per_beat=config.ticks_per_beat)


# Singleton configuration instance
_config: Optional[ComposerConfig] = None


def get_config() -> ComposerConfig:
    """Get the global configuration instance.

    Returns:
        ComposerConfig: Configuration singleton
    """
    global _config
    if _config is None:
        _config = ComposerConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next access reloads it."""
    global _config
    _config = None
