"""Terminal sink for running commands locally."""

from __future__ import annotations

import threading

from rich.console import Console
from rich.markup import escape

from slackshell.relay.sink import MessageHandle, ThreadHandle


class ConsoleSink:
    """Render a thread of pages on a rich console.

    Pages only ever grow while active, so an update prints just the appended
    suffix and the terminal shows one continuous stream.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._bodies: dict[MessageHandle, str] = {}
        self._threads = 0
        self._print_lock = threading.Lock()

    async def start_thread(self, channel: str, text: str) -> ThreadHandle:
        self._threads += 1
        self._print(f"[bold blue]{escape(text)}[/bold blue]")
        return f"{channel}:{self._threads}"

    async def reply(self, channel: str, thread: ThreadHandle, text: str) -> MessageHandle:
        handle = f"{thread}:{len(self._bodies)}"
        self._bodies[handle] = text
        with self._print_lock:
            self.console.rule(f"[dim]page {len(self._bodies)}[/dim]")
            self.console.out(text, end="")
        return handle

    async def update_message(self, channel: str, message: MessageHandle, text: str) -> MessageHandle:
        previous = self._bodies.get(message, "")
        self._bodies[message] = text
        if text.startswith(previous):
            with self._print_lock:
                self.console.out(text[len(previous) :], end="")
        else:
            with self._print_lock:
                self.console.rule("[dim]page rewritten[/dim]")
                self.console.out(text, end="")
        return message

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)
