"""Configuration management for slackshell."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from slackshell.errors import ConfigurationError

_REDACT_PATTERN = re.compile(r"[A-Za-z0-9]")
_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class TokenFileConfig(BaseModel):
    """Tokens read from the JSON config file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    slack_token: str = Field(alias="slack-token", min_length=1, description="Bot token (xoxb-...)")
    slack_app_token: Optional[str] = Field(
        default=None, alias="slack-app-token", description="App-level token for Socket Mode (xapp-...)"
    )


class Settings(BaseSettings):
    """Relay settings, overridable by command line flags."""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_SHELL_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    wait: float = Field(default=5.0, gt=0, description="Seconds between relay ticks")
    char_limit: int = Field(default=3000, gt=0, description="Maximum characters per message page")
    debug: bool = Field(default=False, description="Debug logging")
    no_stdout: bool = Field(default=False, description="Do not relay standard output")
    no_stderr: bool = Field(default=False, description="Do not relay standard error")
    app_token: Optional[str] = Field(default=None, description="Fallback Socket Mode app token")


def load_config(path: Path) -> TokenFileConfig:
    """Load and validate the token config file.

    Raises:
        ConfigurationError: if the file is missing, unreadable or malformed.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"error while reading config file from {str(path)!r}: {exc}") from exc
    try:
        return TokenFileConfig.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"error while parsing config file {str(path)!r}: {exc}") from exc


def load_settings(**overrides: object) -> Settings:
    """Build settings from env/.env, then apply non-None overrides."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**updates)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings: {exc}") from exc


def redact_token(token: str) -> str:
    """Replace every ASCII letter and digit with ``X``."""
    return _REDACT_PATTERN.sub("X", token)


def parse_duration(value: str) -> float:
    """Parse ``5s``, ``250ms``, ``1m``, ``1h`` or a bare number of seconds."""
    match = _DURATION_PATTERN.match(value)
    if match is None:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]
