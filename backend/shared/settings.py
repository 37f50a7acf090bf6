"""Scorecard configuration via environment variables."""

from enum import StrEnum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class StorageBackend(StrEnum):
    MEMORY = "memory"
    FILE = "file"
    SQLITE = "sqlite"


class LogFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ScorecardSettings(BaseSettings):
    model_config = {"env_prefix": "SCORECARD_"}

    storage_backend: StorageBackend = StorageBackend.FILE
    storage_path: str = Field(default="backend/data/game.json", min_length=1)
    database_path: str = Field(default="backend/data/scorecard.db", min_length=1)

    log_dir: str | None = None
    log_format: LogFormat = LogFormat.CONSOLE
    log_level: str = "INFO"

    # Share links point at the web client's import route.
    share_origin: str = Field(default="http://localhost:5173", min_length=1)
    share_path: str = "/import"
    share_param: str = Field(default="data", min_length=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _VALID_LOG_LEVELS:
            msg = f"Invalid log level {v!r}. Must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}."
            raise ValueError(msg)
        return level

    @field_validator("share_origin")
    @classmethod
    def validate_share_origin(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped:
            raise ValueError("share_origin must not be empty")
        return stripped
