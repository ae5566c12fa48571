"""Base channel interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from slackshell.channels.bus import MessageBus
from slackshell.channels.events import InboundMessage
from slackshell.relay.sink import MessageSink


class BaseChannel(ABC):
    """Abstract base class for channel adapters."""

    name: str = "base"

    def __init__(self, bus: MessageBus) -> None:
        self.bus = bus
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """Connect to the backend and start receiving notifications."""

    @abstractmethod
    async def stop(self) -> None:
        """Disconnect from the backend."""

    @abstractmethod
    def sink(self) -> MessageSink:
        """Sink that delivers pages back to this channel."""

    @property
    def is_running(self) -> bool:
        return self._running

    async def publish_inbound(self, message: InboundMessage) -> None:
        await self.bus.publish_inbound(message)
