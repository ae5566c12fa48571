"""slackshell - run shell commands from Slack and stream their output back."""

from .command import Command, parse_message
from .relay import Execution, RelayConfig

__version__ = "0.1.0"

__all__ = ["Command", "Execution", "RelayConfig", "parse_message"]
