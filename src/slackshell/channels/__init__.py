"""Channel adapters and bus exports."""

from slackshell.channels.base import BaseChannel
from slackshell.channels.bus import MessageBus
from slackshell.channels.console import ConsoleSink
from slackshell.channels.events import InboundMessage
from slackshell.channels.manager import ChannelManager
from slackshell.channels.slack import SlackChannel, SlackConfig, SlackSink

__all__ = [
    "BaseChannel",
    "ChannelManager",
    "ConsoleSink",
    "InboundMessage",
    "MessageBus",
    "SlackChannel",
    "SlackConfig",
    "SlackSink",
]
