from __future__ import annotations

import asyncio

import pytest

from slackshell.command import Command
from slackshell.errors import SpawnError
from slackshell.relay.accumulator import OutputAccumulator
from slackshell.relay.config import COMPLETION_MARKER, RelayConfig
from slackshell.relay.drainer import STREAM_LIMIT
from slackshell.relay.execution import Execution, current_execution
from slackshell.relay.supervisor import ProcessSupervisor

FAST = RelayConfig(char_limit=100, poll_interval=0.01)


@pytest.mark.asyncio
async def test_supervisor_merges_both_streams() -> None:
    accumulator = OutputAccumulator()
    supervisor = ProcessSupervisor(FAST, accumulator)

    process = await supervisor.start(Command.from_text("echo out; echo err >&2; echo again"))
    await supervisor.drained()
    await process.wait()

    lines = accumulator.snapshot().text.splitlines()
    assert sorted(lines) == ["again", "err", "out"]
    assert lines.index("out") < lines.index("again")
    assert accumulator.snapshot().complete
    assert supervisor.returncode == 0


@pytest.mark.asyncio
async def test_supervisor_keeps_output_after_line_longer_than_stream_limit() -> None:
    accumulator = OutputAccumulator()
    supervisor = ProcessSupervisor(FAST, accumulator)
    size = STREAM_LIMIT + 50_000

    process = await supervisor.start(Command.from_text(f"head -c {size} /dev/zero | tr '\\0' a; echo; seq 1 5000"))
    await supervisor.drained()
    await process.wait()

    lines = accumulator.snapshot().text.splitlines()
    assert [len(line) for line in lines[:2]] == [STREAM_LIMIT, 50_000]
    assert set(lines[0] + lines[1]) == {"a"}
    assert lines[2:] == [str(i) for i in range(1, 5001)]
    assert accumulator.snapshot().complete


@pytest.mark.asyncio
async def test_supervisor_suppressed_stream_is_complete_from_start() -> None:
    accumulator = OutputAccumulator()
    config = RelayConfig(char_limit=100, poll_interval=0.01, capture_stderr=False)
    supervisor = ProcessSupervisor(config, accumulator)

    await supervisor.start(Command.from_text("echo visible; echo hidden >&2"))
    assert accumulator.is_done("stderr")
    await supervisor.drained()

    assert accumulator.snapshot().text == "visible\n"


@pytest.mark.asyncio
async def test_supervisor_raises_spawn_error_for_missing_executable() -> None:
    accumulator = OutputAccumulator()
    supervisor = ProcessSupervisor(FAST, accumulator)

    with pytest.raises(SpawnError, match="cannot start"):
        await supervisor.start(Command(text="nope", argv=("/nonexistent/slackshell-test-binary",)))
    assert accumulator.snapshot().complete


@pytest.mark.asyncio
async def test_execution_relays_output_into_thread(sink) -> None:
    command = Command.from_text("printf 'a%.0s' $(seq 1 250)")

    result = await Execution(command, sink, "C1", FAST).run()

    assert result.ok
    assert sink.threads == [f"Received: {command.text}"]
    assert result.pages == 3
    assert result.output_chars == 251
    assert [len(body) for body in sink.bodies()[:-1]] == [100, 100]
    assert "".join(sink.bodies()) == "a" * 250 + "\n" + COMPLETION_MARKER


@pytest.mark.asyncio
async def test_execution_records_exit_status(sink) -> None:
    config = RelayConfig(char_limit=100, poll_interval=0.2)

    result = await Execution(Command.from_text("echo bye; exit 3"), sink, "C1", config).run()

    assert result.ok
    assert result.returncode == 3
    assert sink.bodies() == ["bye\n" + COMPLETION_MARKER]


@pytest.mark.asyncio
async def test_execution_with_no_output_sends_only_marker(sink) -> None:
    result = await Execution(Command.from_text("true"), sink, "C1", FAST).run()

    assert result.pages == 1
    assert sink.bodies() == [COMPLETION_MARKER]


@pytest.mark.asyncio
async def test_execution_reports_spawn_failure_to_thread(sink) -> None:
    command = Command(text="broken", argv=("/nonexistent/slackshell-test-binary",))

    result = await Execution(command, sink, "C1", FAST).run()

    assert not result.ok
    assert [kind for kind, _, _ in sink.calls] == ["start_thread", "reply"]
    assert sink.calls[1][2].startswith("Failed to start command:")


@pytest.mark.asyncio
async def test_concurrent_executions_are_independent(sink_factory) -> None:
    first, second = sink_factory(), sink_factory()

    results = await asyncio.gather(
        Execution(Command.from_text("echo one"), first, "C1", FAST).run(),
        Execution(Command.from_text("echo two; echo three"), second, "C2", FAST).run(),
    )

    assert all(result.ok for result in results)
    assert results[0].execution_id != results[1].execution_id
    assert first.bodies() == ["one\n" + COMPLETION_MARKER]
    assert second.bodies() == ["two\nthree\n" + COMPLETION_MARKER]


def test_current_execution_outside_run() -> None:
    assert current_execution() == "-"
