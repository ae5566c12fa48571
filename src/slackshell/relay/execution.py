"""One command run: thread, process, relay."""

from __future__ import annotations

import contextvars
import uuid
from dataclasses import dataclass

from loguru import logger

from slackshell.command import Command
from slackshell.errors import SpawnError
from slackshell.relay.accumulator import OutputAccumulator
from slackshell.relay.config import RelayConfig
from slackshell.relay.pagination import PaginationRelay
from slackshell.relay.sink import MessageSink, ThreadHandle
from slackshell.relay.supervisor import ProcessSupervisor

_current_execution: contextvars.ContextVar[str] = contextvars.ContextVar("slackshell_execution", default="-")


def current_execution() -> str:
    """Id of the execution running in this context, ``-`` outside one."""
    return _current_execution.get()


@dataclass(frozen=True)
class ExecutionResult:
    execution_id: str
    thread: ThreadHandle
    pages: int = 0
    output_chars: int = 0
    error: str | None = None
    returncode: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Execution:
    """Run one command and relay its output into a new thread."""

    def __init__(self, command: Command, sink: MessageSink, channel: str, config: RelayConfig) -> None:
        self.command = command
        self.sink = sink
        self.channel = channel
        self.config = config
        self.execution_id = uuid.uuid4().hex[:8]

    async def run(self) -> ExecutionResult:
        token = _current_execution.set(self.execution_id)
        try:
            return await self._run()
        finally:
            _current_execution.reset(token)

    async def _run(self) -> ExecutionResult:
        logger.info("execution.start channel={} command={!r}", self.channel, self.command.text)
        thread = await self.sink.start_thread(self.channel, f"Received: {self.command.text}")

        accumulator = OutputAccumulator()
        supervisor = ProcessSupervisor(self.config, accumulator)
        try:
            await supervisor.start(self.command)
        except SpawnError as exc:
            logger.warning("execution.spawn_failed error={}", exc)
            await self.sink.reply(self.channel, thread, f"Failed to start command: {exc}")
            return ExecutionResult(self.execution_id, thread, error=str(exc))

        relay = PaginationRelay(self.sink, self.channel, thread, accumulator, self.config)
        result = await relay.run()
        await supervisor.drained()
        # None while the child is still running with its output streams closed
        returncode = supervisor.returncode
        logger.info(
            "execution.done pages={} chars={} returncode={}", result.pages, result.output_chars, returncode
        )
        return ExecutionResult(
            self.execution_id,
            thread,
            pages=result.pages,
            output_chars=result.output_chars,
            returncode=returncode,
        )
