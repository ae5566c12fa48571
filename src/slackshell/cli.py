"""slackshell command line interface."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from slackshell.channels import ChannelManager, ConsoleSink, MessageBus, SlackChannel, SlackConfig
from slackshell.command import Command
from slackshell.config import Settings, load_config, load_settings, parse_duration, redact_token
from slackshell.errors import ConfigurationError
from slackshell.logging_utils import configure_logging
from slackshell.relay import Execution, RelayConfig

app = typer.Typer(
    name="slackshell",
    help="Run shell commands from Slack and stream their output back.",
    add_completion=False,
)


def _duration(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _exit_with_error(exc: Exception) -> None:
    typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(1) from exc


def _prepare(
    *,
    wait: Optional[str],
    debug: bool,
    no_stdout: bool,
    no_stderr: bool,
    char_limit: Optional[int],
) -> tuple[Settings, RelayConfig]:
    settings = load_settings(
        wait=_duration(wait),
        debug=debug or None,
        no_stdout=no_stdout or None,
        no_stderr=no_stderr or None,
        char_limit=char_limit,
    )
    configure_logging(debug=settings.debug)
    return settings, RelayConfig.from_settings(settings)


@app.command()
def serve(
    config: Path = typer.Option(  # noqa: B008
        Path("config.json"), "--config", "-c", envvar="SLACK_SHELL_CONFIG", help="Path to configuration FILE"
    ),
    display_unredacted: bool = typer.Option(
        False, "--display-unredacted", "--displayUnredacted", help="Display the Slack token unredacted"
    ),
    wait: Optional[str] = typer.Option(None, "--wait", help="Wait duration between requests, e.g. 5s or 500ms"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode"),
    no_stdout: bool = typer.Option(False, "--no-stdout", "--noStdout", help="Do not relay standard output"),
    no_stderr: bool = typer.Option(False, "--no-stderr", "--noStderr", help="Do not relay standard error"),
    char_limit: Optional[int] = typer.Option(
        None, "--char-limit", "--charLimit", help="Maximum characters per message page"
    ),
) -> None:
    """Listen for mentions on Slack and run the mentioned commands."""
    try:
        settings, relay_config = _prepare(
            wait=wait, debug=debug, no_stdout=no_stdout, no_stderr=no_stderr, char_limit=char_limit
        )
        logger.info("Using {} as config file...", config)
        tokens = load_config(config)
        display_token = tokens.slack_token if display_unredacted else redact_token(tokens.slack_token)
        logger.info("Using {} as Slack token", display_token)
        app_token = tokens.slack_app_token or settings.app_token
        if not app_token:
            raise ConfigurationError("slack app token is not configured (slack-app-token or SLACK_SHELL_APP_TOKEN)")
    except ConfigurationError as exc:
        _exit_with_error(exc)
        return

    bus = MessageBus()
    manager = ChannelManager(bus, relay_config)
    manager.register(SlackChannel(bus, SlackConfig(bot_token=tokens.slack_token, app_token=app_token)))
    logger.info(
        "serve.start char_limit={} wait={}s channels={}",
        relay_config.char_limit,
        relay_config.poll_interval,
        ",".join(manager.enabled_channels()),
    )
    try:
        asyncio.run(manager.run())
    except KeyboardInterrupt:
        logger.info("serve.interrupted")


@app.command()
def run(
    command: str = typer.Argument(..., help="Command text to execute"),
    wait: Optional[str] = typer.Option(None, "--wait", help="Wait duration between page updates"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode"),
    no_stdout: bool = typer.Option(False, "--no-stdout", "--noStdout", help="Do not relay standard output"),
    no_stderr: bool = typer.Option(False, "--no-stderr", "--noStderr", help="Do not relay standard error"),
    char_limit: Optional[int] = typer.Option(
        None, "--char-limit", "--charLimit", help="Maximum characters per message page"
    ),
) -> None:
    """Run one command locally, relaying its pages to the terminal."""
    try:
        _, relay_config = _prepare(wait=wait, debug=debug, no_stdout=no_stdout, no_stderr=no_stderr, char_limit=char_limit)
        if not command.strip():
            raise ConfigurationError("empty command")
    except ConfigurationError as exc:
        _exit_with_error(exc)
        return

    sink = ConsoleSink()
    execution = Execution(Command.from_text(command.strip()), sink, "local", relay_config)
    result = asyncio.run(execution.run())
    sink.console.print()
    if not result.ok:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
