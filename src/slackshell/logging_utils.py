"""Runtime logging helpers."""

from __future__ import annotations

import logging
import os
import sys

import loguru
from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {extra[execution]} | {message}"
# stdlib loggers of the Slack client libraries
_BACKEND_LOGGERS = ("slack_bolt", "slack_sdk")
_CONFIGURED_LEVEL: str | None = None


def configure_logging(*, debug: bool = False) -> None:
    """Configure process-level logging once per level."""
    from slackshell.relay.execution import current_execution

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["execution"] = current_execution()

    global _CONFIGURED_LEVEL
    level = os.getenv("SLACK_SHELL_LOG_LEVEL", "DEBUG" if debug else "INFO").upper()
    if level == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    logger.configure(patcher=inject_context)
    for name in _BACKEND_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
    _CONFIGURED_LEVEL = level
