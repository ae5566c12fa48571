"""Inbound notification parsing and command construction."""

from __future__ import annotations

import base64
from dataclasses import dataclass

from slackshell.errors import ParseError

# Slack escapes these three characters in message text.
_ENTITY_ESCAPES: tuple[tuple[str, str], ...] = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)
_NBSP = "\u00a0"
_PREFIX_TOKENS = 2


@dataclass(frozen=True)
class Command:
    """One command to execute, wrapped so the shell never re-quotes it."""

    text: str
    argv: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> Command:
        payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
        return cls(text=text, argv=("bash", "-c", f"{{echo,{payload}}}|{{base64,-d}}|bash"))

    @property
    def payload(self) -> str:
        """Base64 payload embedded in the execution string."""
        script = self.argv[-1]
        return script[len("{echo,") : script.index("}")]

    def render(self) -> str:
        return " ".join(self.argv)


def unescape_entities(text: str) -> str:
    for entity, char in _ENTITY_ESCAPES:
        text = text.replace(entity, char)
    return text


def parse_message(message: str) -> Command:
    """Turn a notification like ``user: @app ls -la`` into a command.

    The first two space separated tokens (sender and mention) are dropped and
    the remainder is the literal command text.

    Raises:
        ParseError: if nothing is left after dropping the prefix.
    """
    message = unescape_entities(message)
    # copy-pasting from Slack leaves non-breaking spaces between words
    message = message.replace(_NBSP, " ")

    command_text = " ".join(message.split(" ")[_PREFIX_TOKENS:]).strip()
    if not command_text:
        raise ParseError(f"empty command received: {message!r}")
    return Command.from_text(command_text)
