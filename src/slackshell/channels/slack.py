"""Slack channel adapter."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import aiohttp
from loguru import logger
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from slackshell.channels.base import BaseChannel
from slackshell.channels.bus import MessageBus
from slackshell.channels.events import InboundMessage
from slackshell.errors import SinkError
from slackshell.relay.sink import MessageHandle, ThreadHandle


def notification_text(event: dict[str, Any]) -> str:
    """Render an ``app_mention`` event as ``<user>: <text>``.

    That is the shape of a Slack desktop notification: sender, then the
    mention, then the command.
    """
    return f"{event.get('user', '')}: {event.get('text', '')}"


def code_block(text: str) -> str:
    return f"```{text}```"


@dataclass(frozen=True)
class SlackConfig:
    """Slack adapter config."""

    bot_token: str
    app_token: str


class SlackSink:
    """Message sink backed by the Slack Web API."""

    def __init__(self, client: AsyncWebClient, *, wrap_pages: bool = True) -> None:
        self._client = client
        self._wrap_pages = wrap_pages

    async def start_thread(self, channel: str, text: str) -> ThreadHandle:
        response = await self._call("chat.postMessage", self._client.chat_postMessage, channel=channel, text=text)
        return str(response["ts"])

    async def reply(self, channel: str, thread: ThreadHandle, text: str) -> MessageHandle:
        response = await self._call(
            "chat.postMessage",
            self._client.chat_postMessage,
            channel=channel,
            thread_ts=thread,
            text=self._page(text),
        )
        return str(response["ts"])

    async def update_message(self, channel: str, message: MessageHandle, text: str) -> MessageHandle:
        response = await self._call(
            "chat.update", self._client.chat_update, channel=channel, ts=message, text=self._page(text)
        )
        return str(response["ts"])

    def _page(self, text: str) -> str:
        return code_block(text) if self._wrap_pages else text

    @staticmethod
    async def _call(method: str, func: Any, **kwargs: Any) -> Any:
        try:
            return await func(**kwargs)
        except SlackApiError as exc:
            raise SinkError(f"slack {method} failed: {exc.response.get('error', exc)}") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SinkError(f"slack {method} failed: {exc!r}") from exc


class SlackChannel(BaseChannel):
    """Slack adapter over Socket Mode."""

    name = "slack"

    def __init__(self, bus: MessageBus, config: SlackConfig) -> None:
        super().__init__(bus)
        self._config = config
        self._app: AsyncApp | None = None
        self._handler: AsyncSocketModeHandler | None = None
        self._sink: SlackSink | None = None

    async def start(self) -> None:
        if not self._config.bot_token:
            raise RuntimeError("slack bot token is empty")
        if not self._config.app_token:
            raise RuntimeError("slack app token is empty")

        app = AsyncApp(token=self._config.bot_token)
        self._app = app
        self._sink = SlackSink(app.client)

        @app.event("app_mention")
        async def on_mention(event: dict[str, Any]) -> None:
            await self._on_mention(event)

        @app.event("message")
        async def on_message(event: dict[str, Any]) -> None:
            logger.debug("slack.channel.ignored type={} subtype={}", event.get("type"), event.get("subtype"))

        self._handler = AsyncSocketModeHandler(app, self._config.app_token)
        self._running = True
        logger.info("slack.channel.start")
        try:
            await self._handler.start_async()
        finally:
            self._running = False
            logger.info("slack.channel.stopped")

    async def stop(self) -> None:
        self._running = False
        if self._handler is None:
            return
        await self._handler.close_async()
        self._handler = None

    def sink(self) -> SlackSink:
        if self._sink is None:
            self._sink = SlackSink(AsyncWebClient(token=self._config.bot_token))
        return self._sink

    async def _on_mention(self, event: dict[str, Any]) -> None:
        channel_id = str(event.get("channel", ""))
        content = notification_text(event)
        logger.info(
            "slack.channel.inbound channel={} sender_id={} content={}",
            channel_id,
            event.get("user", ""),
            content[:100],
        )
        await self.publish_inbound(
            InboundMessage(
                channel=self.name,
                sender_id=str(event.get("user", "")),
                chat_id=channel_id,
                content=content,
                metadata={"ts": event.get("ts"), "thread_ts": event.get("thread_ts")},
            )
        )
