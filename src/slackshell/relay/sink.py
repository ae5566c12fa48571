"""Chat backend contract consumed by the pagination relay."""

from __future__ import annotations

from typing import Protocol

# Opaque backend identifiers (Slack message timestamps).
ThreadHandle = str
MessageHandle = str


class MessageSink(Protocol):
    """Where pages are delivered.

    Every operation raises ``SinkError`` on failure; the relay does not retry.
    """

    async def start_thread(self, channel: str, text: str) -> ThreadHandle:
        """Post the root message of a new conversation thread."""
        ...

    async def reply(self, channel: str, thread: ThreadHandle, text: str) -> MessageHandle:
        """Post a new message linked to ``thread``."""
        ...

    async def update_message(self, channel: str, message: MessageHandle, text: str) -> MessageHandle:
        """Replace the text of an existing message."""
        ...
