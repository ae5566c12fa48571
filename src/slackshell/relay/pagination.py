"""Paginated relay of accumulated output to a message sink.

The accumulated text is cut into pages of at most ``char_limit`` characters by
raw character count (a page may end mid-line). Page ``i`` always holds
``text[i * char_limit : (i + 1) * char_limit]``; the last page is updated in
place while it grows, and crossing a page boundary finalizes it and opens a
new reply in the thread on the following tick.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from slackshell.relay.accumulator import OutputAccumulator, OutputSnapshot
from slackshell.relay.config import RelayConfig
from slackshell.relay.sink import MessageHandle, MessageSink, ThreadHandle


class RelayState(enum.Enum):
    AWAITING_FIRST_CONTENT = "awaiting_first_content"
    UPDATING_ACTIVE_PAGE = "updating_active_page"
    EMITTING_OVERFLOW_PAGE = "emitting_overflow_page"
    FINISHED = "finished"


@dataclass
class PaginationCursor:
    index: int = 0
    pending_new_page: bool = False


@dataclass(frozen=True)
class PageWrite:
    """One sink call: open a new linked page or update the active one."""

    kind: Literal["reply", "update"]
    page: int
    body: str


class Paginator:
    """Pure page-boundary state machine, advanced once per tick."""

    def __init__(self, char_limit: int, completion_marker: str) -> None:
        if len(completion_marker) > char_limit:
            raise ValueError(f"completion marker does not fit in a page of {char_limit} characters")
        self.char_limit = char_limit
        self.completion_marker = completion_marker
        self.cursor = PaginationCursor()
        self.state = RelayState.AWAITING_FIRST_CONTENT
        self._pages = 0
        self._active_body: str | None = None

    @property
    def pages(self) -> int:
        """Number of pages opened so far."""
        return self._pages

    @property
    def finished(self) -> bool:
        return self.state is RelayState.FINISHED

    def advance(self, snapshot: OutputSnapshot) -> list[PageWrite]:
        if self.finished:
            return []

        text = snapshot.text
        size = len(text)
        limit = self.char_limit
        cursor = self.cursor
        start = limit * cursor.index
        writes: list[PageWrite] = []

        if not cursor.pending_new_page and size > limit * (cursor.index + 1):
            # the active page is full: finalize it, continue on the next tick
            writes.extend(self._write_active(text[start : start + limit]))
            cursor.index += 1
            cursor.pending_new_page = True
        elif cursor.pending_new_page:
            if size > limit * (cursor.index + 1):
                writes.append(self._open_page(text[start : start + limit]))
                cursor.index += 1
            elif snapshot.complete:
                # the tail page is opened together with the marker below
                cursor.pending_new_page = False
                self._active_body = None
            elif size > start:
                writes.append(self._open_page(text[start:size]))
                cursor.pending_new_page = False
        elif not snapshot.complete:
            writes.extend(self._write_active(text[start:size]))

        if snapshot.complete and not cursor.pending_new_page:
            writes.extend(self._finish(text[limit * cursor.index : size]))

        self._sync_state()
        return writes

    def _open_page(self, body: str) -> PageWrite:
        self._pages += 1
        self._active_body = body
        return PageWrite("reply", self._pages - 1, body)

    def _write_active(self, body: str) -> list[PageWrite]:
        if self._active_body is None:
            if not body:
                return []
            return [self._open_page(body)]
        if body == self._active_body:
            return []
        self._active_body = body
        return [PageWrite("update", self._pages - 1, body)]

    def _finish(self, tail: str) -> list[PageWrite]:
        self.state = RelayState.FINISHED
        final_body = tail + self.completion_marker
        if len(final_body) <= self.char_limit:
            return self._write_active(final_body)
        # the marker does not fit on the active page; give it its own page
        writes = self._write_active(tail)
        self.cursor.index += 1
        writes.append(self._open_page(self.completion_marker))
        return writes

    def _sync_state(self) -> None:
        if self.finished:
            return
        if self.cursor.pending_new_page:
            self.state = RelayState.EMITTING_OVERFLOW_PAGE
        elif self._active_body is None:
            self.state = RelayState.AWAITING_FIRST_CONTENT
        else:
            self.state = RelayState.UPDATING_ACTIVE_PAGE


@dataclass
class RelayResult:
    pages: int
    output_chars: int


class PaginationRelay:
    """Poll an accumulator and mirror it into a thread of paged messages."""

    def __init__(
        self,
        sink: MessageSink,
        channel: str,
        thread: ThreadHandle,
        accumulator: OutputAccumulator,
        config: RelayConfig,
    ) -> None:
        self.sink = sink
        self.channel = channel
        self.thread = thread
        self.accumulator = accumulator
        self.config = config
        self.paginator = Paginator(config.char_limit, config.completion_marker)
        self._active: MessageHandle | None = None

    @property
    def state(self) -> RelayState:
        return self.paginator.state

    async def tick(self) -> bool:
        """Run one relay step. Returns True once the final page was flushed."""
        snapshot = self.accumulator.snapshot()
        for write in self.paginator.advance(snapshot):
            await self._apply(write)
        return self.paginator.finished

    async def run(self) -> RelayResult:
        """Tick every ``poll_interval`` until the output is fully relayed.

        A ``SinkError`` from any call propagates and ends the relay.
        """
        while not await self.tick():
            await asyncio.sleep(self.config.poll_interval)
        output_chars = len(self.accumulator)
        logger.info("relay.finished pages={} chars={}", self.paginator.pages, output_chars)
        return RelayResult(pages=self.paginator.pages, output_chars=output_chars)

    async def _apply(self, write: PageWrite) -> None:
        if write.kind == "reply" or self._active is None:
            logger.debug("relay.page.open page={} chars={}", write.page, len(write.body))
            self._active = await self.sink.reply(self.channel, self.thread, write.body)
            return
        logger.debug("relay.page.update page={} chars={}", write.page, len(write.body))
        self._active = await self.sink.update_message(self.channel, self._active, write.body)
