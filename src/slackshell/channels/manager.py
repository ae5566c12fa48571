"""Channel manager."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable

from loguru import logger

from slackshell.channels.base import BaseChannel
from slackshell.channels.bus import MessageBus
from slackshell.channels.events import InboundMessage
from slackshell.command import parse_message
from slackshell.errors import ParseError
from slackshell.relay.config import RelayConfig
from slackshell.relay.execution import Execution, ExecutionResult


class ChannelManager:
    """Turn inbound notifications into independent command executions."""

    def __init__(self, bus: MessageBus, config: RelayConfig) -> None:
        self.bus = bus
        self.config = config
        self._channels: dict[str, BaseChannel] = {}
        self._channel_tasks: list[asyncio.Task[None]] = []
        self._executions: set[asyncio.Task[ExecutionResult | None]] = set()
        self._unsub_inbound: Callable[[], None] | None = None

    def register(self, channel: BaseChannel) -> None:
        self._channels[channel.name] = channel

    @property
    def executions(self) -> set[asyncio.Task[ExecutionResult | None]]:
        return set(self._executions)

    def enabled_channels(self) -> Iterable[str]:
        return self._channels.keys()

    async def start(self) -> None:
        self._unsub_inbound = self.bus.on_inbound(self._handle_inbound)
        for channel in self._channels.values():
            self._channel_tasks.append(asyncio.create_task(channel.start()))

    async def run(self) -> None:
        """Start all channels and wait until one of them stops."""
        await self.start()
        try:
            await asyncio.gather(*self._channel_tasks)
        finally:
            await self.stop()

    async def stop(self) -> None:
        for channel in self._channels.values():
            await channel.stop()
        for task in [*self._channel_tasks, *self._executions]:
            task.cancel()
        for task in [*self._channel_tasks, *self._executions]:
            try:
                await task
            except asyncio.CancelledError:
                continue
            except Exception:
                logger.exception("channel.manager.stop.error")
        self._channel_tasks.clear()
        self._executions.clear()
        if self._unsub_inbound is not None:
            self._unsub_inbound()
            self._unsub_inbound = None

    async def _handle_inbound(self, message: InboundMessage) -> None:
        task = asyncio.create_task(self._process_inbound(message))
        self._executions.add(task)
        task.add_done_callback(self._executions.discard)

    async def _process_inbound(self, message: InboundMessage) -> ExecutionResult | None:
        channel = self._channels.get(message.channel)
        if channel is None:
            logger.warning("channel.manager.unknown_channel channel={}", message.channel)
            return None
        try:
            command = parse_message(message.content)
        except ParseError as exc:
            logger.warning("channel.manager.drop chat_id={} error={}", message.chat_id, exc)
            return None

        execution = Execution(command, channel.sink(), message.chat_id, self.config)
        try:
            return await execution.run()
        except Exception:
            logger.exception(
                "channel.manager.execution.error execution={} chat_id={}", execution.execution_id, message.chat_id
            )
            return None
