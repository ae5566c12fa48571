from __future__ import annotations

import pytest

from slackshell.errors import SinkError


class RecordingSink:
    """In-memory message sink that records every call."""

    def __init__(self, *, fail_on_call: int | None = None) -> None:
        self.fail_on_call = fail_on_call
        self.calls: list[tuple[str, str, str]] = []
        self.threads: list[str] = []
        self.pages: dict[str, str] = {}
        self.order: list[str] = []

    def _record(self, kind: str, target: str, text: str) -> None:
        self.calls.append((kind, target, text))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise SinkError(f"{kind} failed on purpose")

    async def start_thread(self, channel: str, text: str) -> str:
        self._record("start_thread", channel, text)
        handle = f"thread-{len(self.threads)}"
        self.threads.append(text)
        return handle

    async def reply(self, channel: str, thread: str, text: str) -> str:
        self._record("reply", thread, text)
        handle = f"msg-{len(self.order)}"
        self.order.append(handle)
        self.pages[handle] = text
        return handle

    async def update_message(self, channel: str, message: str, text: str) -> str:
        self._record("update", message, text)
        assert message in self.pages
        self.pages[message] = text
        return message

    def bodies(self) -> list[str]:
        return [self.pages[handle] for handle in self.order]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sink_factory() -> type[RecordingSink]:
    return RecordingSink
