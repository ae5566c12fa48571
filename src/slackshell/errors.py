"""Application-level exception types for slackshell."""

from __future__ import annotations


class SlackShellError(Exception):
    """Base exception for slackshell."""


class ConfigurationError(SlackShellError):
    """Raised for configuration and startup validation errors."""


class ParseError(SlackShellError):
    """Raised when an inbound notification does not carry a command."""


class SpawnError(SlackShellError):
    """Raised when the command process cannot be started."""


class SinkError(SlackShellError):
    """Raised when the chat backend rejects or fails a message call."""
