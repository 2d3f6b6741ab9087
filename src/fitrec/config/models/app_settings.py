"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration.

    Level, optional JSON log file, and whether console output goes through
    Rich or plain JSON lines.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="Optional log file path")
    use_rich_console: bool = Field(
        default=True,
        description="Render console logs with Rich instead of JSON",
    )

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            msg = f"Invalid log level '{value}'. Expected one of {_LEVELS}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
