"""Output capture, merge and paginated relay."""

from slackshell.relay.accumulator import OutputAccumulator, OutputSnapshot
from slackshell.relay.config import COMPLETION_MARKER, RelayConfig
from slackshell.relay.drainer import drain
from slackshell.relay.execution import Execution, ExecutionResult, current_execution
from slackshell.relay.pagination import PageWrite, PaginationCursor, PaginationRelay, Paginator, RelayState
from slackshell.relay.sink import MessageHandle, MessageSink, ThreadHandle
from slackshell.relay.supervisor import ProcessSupervisor

__all__ = [
    "COMPLETION_MARKER",
    "Execution",
    "ExecutionResult",
    "MessageHandle",
    "MessageSink",
    "OutputAccumulator",
    "OutputSnapshot",
    "PageWrite",
    "PaginationCursor",
    "PaginationRelay",
    "Paginator",
    "ProcessSupervisor",
    "RelayState",
    "ThreadHandle",
    "current_execution",
    "drain",
]
