"""Line-by-line draining of one process output stream."""

from __future__ import annotations

import asyncio

from loguru import logger

from slackshell.relay.accumulator import OutputAccumulator, StreamName

# asyncio.StreamReader buffer limit; longer lines are relayed in fragments of this size
STREAM_LIMIT = 1024 * 1024


def decode_record(line: bytes) -> str:
    """Strip one ``\\n`` or ``\\r\\n`` terminator and decode as UTF-8."""
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    return line.decode("utf-8", errors="replace")


async def drain(
    reader: asyncio.StreamReader,
    accumulator: OutputAccumulator,
    stream: StreamName,
    *,
    limit: int = STREAM_LIMIT,
) -> int:
    """Append every line of ``reader`` to ``accumulator`` until the stream ends.

    A line longer than ``limit`` bytes is appended as consecutive fragments of
    at most ``limit`` bytes, each ending with a newline. An OS error ends the
    drain the same way end-of-stream does. Returns the number of records
    appended.
    """
    count = 0
    try:
        while True:
            try:
                line = await reader.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                line = exc.partial
            except asyncio.LimitOverrunError:
                # the oversized line is still buffered; take its next fragment
                line = await reader.read(limit)
            except OSError as exc:
                logger.warning("drain.read_error stream={} records={} error={!r}", stream, count, exc)
                break
            if not line:
                break
            accumulator.append(decode_record(line) + "\n")
            count += 1
    finally:
        accumulator.finish(stream)
    logger.debug("drain.done stream={} records={}", stream, count)
    return count
