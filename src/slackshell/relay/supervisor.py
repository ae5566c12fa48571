"""Process supervision: spawn the command and attach the drainers."""

from __future__ import annotations

import asyncio

from loguru import logger

from slackshell.command import Command
from slackshell.errors import SpawnError
from slackshell.relay.accumulator import OutputAccumulator
from slackshell.relay.config import RelayConfig
from slackshell.relay.drainer import STREAM_LIMIT, drain

# Reapers outlive their supervisor; keep strong references until they finish.
_background_tasks: set[asyncio.Task[object]] = set()


def _keep(task: asyncio.Task[object]) -> None:
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


class ProcessSupervisor:
    """Start one command with its output merged into an accumulator."""

    def __init__(self, config: RelayConfig, accumulator: OutputAccumulator) -> None:
        self.config = config
        self.accumulator = accumulator
        self.process: asyncio.subprocess.Process | None = None
        self._drainers: list[asyncio.Task[int]] = []

    async def start(self, command: Command) -> asyncio.subprocess.Process:
        """Spawn ``command`` and return without waiting for it.

        Raises:
            SpawnError: if the executable cannot be launched.
        """
        if self.process is not None:
            raise RuntimeError("supervisor already started")

        # suppressed streams have nothing to drain
        if not self.config.capture_stdout:
            self.accumulator.finish("stdout")
        if not self.config.capture_stderr:
            self.accumulator.finish("stderr")

        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE if self.config.capture_stdout else asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE if self.config.capture_stderr else asyncio.subprocess.DEVNULL,
                limit=STREAM_LIMIT,
            )
        except OSError as exc:
            self.accumulator.finish("stdout")
            self.accumulator.finish("stderr")
            raise SpawnError(f"cannot start {command.argv[0]!r}: {exc}") from exc

        self.process = process
        logger.info("process.start pid={} command={!r}", process.pid, command.text)
        for stream, reader in (("stdout", process.stdout), ("stderr", process.stderr)):
            if reader is not None:
                task = asyncio.create_task(drain(reader, self.accumulator, stream, limit=STREAM_LIMIT))
                self._drainers.append(task)
        _keep(asyncio.create_task(self._reap(process)))
        return process

    @property
    def returncode(self) -> int | None:
        if self.process is None:
            return None
        return self.process.returncode

    async def drained(self) -> None:
        """Wait until every drainer has finished."""
        if self._drainers:
            await asyncio.gather(*self._drainers)

    async def _reap(self, process: asyncio.subprocess.Process) -> int:
        returncode = await process.wait()
        logger.info("process.exit pid={} returncode={}", process.pid, returncode)
        return returncode
