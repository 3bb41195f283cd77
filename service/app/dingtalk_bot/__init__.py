"""
DingTalk bot module for the QingLong environment service.

ARCHITECTURE: Thin routing layer over the QingLong client.
- dingtalk-stream SDK delivers robot messages
- CommandRouter parses `LIST` / `UPDATE#key=value`
- QingLongClient reads or updates environment variables
- Reply is posted to the session webhook, then the message is acknowledged
"""

from .bot import start_bot, shutdown_bot, register_dingtalk_stream_client, is_bot_registered
from .router import CommandRouter, InboundChatEvent, ChatTransport
from .commands import Command, parse_command

__all__ = [
    "start_bot",
    "shutdown_bot",
    "register_dingtalk_stream_client",
    "is_bot_registered",
    "CommandRouter",
    "InboundChatEvent",
    "ChatTransport",
    "Command",
    "parse_command",
]
