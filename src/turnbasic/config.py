"""Configuration management for TurnBASIC."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TURNBASIC_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Driver Configuration
    turn_delay_seconds: float = Field(default=0.005, description="Delay between turns while a program runs")
    idle_prompt: str = Field(default="] ", description="Prompt shown when the interpreter is idle")
    input_prompt: str = Field(default="? ", description="Prompt shown when a program waits for INPUT")
    break_sentinel: str = Field(default="\N{COLLISION SYMBOL}", description="Submitted text that requests a break")
    seed: Optional[int] = Field(None, description="Fixed random seed; defaults to wall-clock time")

    # Engine Configuration
    warnings: bool = Field(default=False, description="Report use of undeclared variables")
    tracing: bool = Field(default=False, description="Emit a trace event for every statement")

    # Host Configuration
    programs_dir: Path = Field(default=Path("programs"), description="Directory searched for bare program names")
    show_welcome: bool = Field(default=True, description="Print the welcome banner in interactive sessions")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Explicit values taking precedence over the environment

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)  # type: ignore[arg-type]
    if settings.turn_delay_seconds < 0:
        raise ConfigurationError(f"turn_delay_seconds must not be negative: {settings.turn_delay_seconds}")
    return settings
