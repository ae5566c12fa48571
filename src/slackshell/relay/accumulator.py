"""Shared output buffer written by the stream drainers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Literal

StreamName = Literal["stdout", "stderr"]
STREAMS: tuple[StreamName, ...] = ("stdout", "stderr")


@dataclass(frozen=True)
class OutputSnapshot:
    """Immutable view of the accumulator at one instant."""

    text: str
    stdout_done: bool
    stderr_done: bool

    @property
    def complete(self) -> bool:
        return self.stdout_done and self.stderr_done


class OutputAccumulator:
    """Append-only text buffer with one completion flag per stream.

    Appends and snapshots hold the same mutex, so a record is never split and
    a snapshot's text always contains every record appended before its flags
    were set.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[str] = []
        self._size = 0
        self._done: dict[StreamName, bool] = dict.fromkeys(STREAMS, False)

    def append(self, record: str) -> None:
        with self._lock:
            self._records.append(record)
            self._size += len(record)

    def finish(self, stream: StreamName) -> None:
        """Mark one stream as fully drained. Idempotent."""
        with self._lock:
            self._done[stream] = True

    def is_done(self, stream: StreamName) -> bool:
        with self._lock:
            return self._done[stream]

    def __len__(self) -> int:
        with self._lock:
            return self._size

    def snapshot(self) -> OutputSnapshot:
        with self._lock:
            if len(self._records) > 1:
                # compact so the next snapshot joins less
                self._records = ["".join(self._records)]
            text = self._records[0] if self._records else ""
            return OutputSnapshot(text=text, stdout_done=self._done["stdout"], stderr_done=self._done["stderr"])
