"""Per-execution relay options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from slackshell.errors import ConfigurationError

if TYPE_CHECKING:
    from slackshell.config import Settings

COMPLETION_MARKER = "\nCommand finished"


@dataclass(frozen=True)
class RelayConfig:
    """Options shared by the supervisor and the pagination relay."""

    char_limit: int = 3000
    poll_interval: float = 5.0
    capture_stdout: bool = True
    capture_stderr: bool = True
    completion_marker: str = COMPLETION_MARKER

    def __post_init__(self) -> None:
        if not self.capture_stdout and not self.capture_stderr:
            raise ConfigurationError("cannot suppress stdout and stderr at the same time")
        if self.char_limit <= 0:
            raise ConfigurationError(f"char limit must be positive, got {self.char_limit}")
        if len(self.completion_marker) > self.char_limit:
            raise ConfigurationError(
                f"char limit must be at least {len(self.completion_marker)} to fit the completion marker, "
                f"got {self.char_limit}"
            )
        if self.poll_interval <= 0:
            raise ConfigurationError(f"poll interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_settings(cls, settings: Settings) -> RelayConfig:
        return cls(
            char_limit=settings.char_limit,
            poll_interval=settings.wait,
            capture_stdout=not settings.no_stdout,
            capture_stderr=not settings.no_stderr,
        )
