"""
Command router - turns one inbound chat message into one reply.

Every event is acknowledged exactly once, whatever happens while handling
it. Without the acknowledgement DingTalk redelivers the same message after
60 seconds.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from app.qinglong import ErrorKind, QingLongClient
from app.utils.error_utils import get_error_message
from .commands import (
    Command,
    parse_command,
    parse_assignment,
    format_variable_list,
    format_usage_help,
)
from .dingtalk_api import build_reply_message, send_reply
from .logging_config import bot_logger as logger


@dataclass(frozen=True)
class InboundChatEvent:
    command_text: str
    sender_id: str
    reply_channel: str  # session webhook URL
    correlation_id: str  # transport message id


class ChatTransport(Protocol):
    async def get_access_token(self) -> str: ...

    async def acknowledge(self, message_id: str, payload: Dict[str, Any]) -> None: ...


ReplySender = Callable[[str, Dict[str, Any], str], Awaitable[Dict[str, Any]]]

# Expected user mistakes are logged as warnings, the rest as errors
_EXPECTED_ERROR_KINDS = {ErrorKind.BAD_REQUEST, ErrorKind.ENV_NOT_FOUND}


class CommandRouter:
    """Dispatches bot commands to the QingLong client and replies."""

    def __init__(
        self,
        qinglong: QingLongClient,
        transport: ChatTransport,
        reply_sender: ReplySender = send_reply,
    ):
        self.qinglong = qinglong
        self.transport = transport
        self.reply_sender = reply_sender

    async def handle_event(self, event: InboundChatEvent) -> Dict[str, Any]:
        """
        Handle one event: dispatch, reply, acknowledge.

        Returns the acknowledgement payload (webhook response body, or an
        empty dict when handling failed before the reply was sent).
        """
        ack_payload: Dict[str, Any] = {}
        try:
            reply_text = await self.dispatch(event.command_text)

            access_token = await self.transport.get_access_token()
            message = build_reply_message(reply_text, event.sender_id)
            ack_payload = await self.reply_sender(event.reply_channel, message, access_token) or {}

        except Exception as e:
            logger.error(f"Failed to handle message {event.correlation_id}: {e}", exc_info=True)

        finally:
            await self.transport.acknowledge(event.correlation_id, ack_payload)

        return ack_payload

    async def dispatch(self, command_text: Optional[str]) -> str:
        """Run the command and return the reply text."""
        command, content = parse_command(command_text)
        logger.info(f"Received command={command}")

        if command == Command.LIST.value:
            # List failures propagate; handle_event still acknowledges
            names = await self.qinglong.list_environment_variable_names()
            return format_variable_list(names)

        if command == Command.UPDATE.value:
            return await self.handle_update(content)

        return format_usage_help()

    async def handle_update(self, content: Optional[str]) -> str:
        key, value = parse_assignment(content)

        try:
            await self.qinglong.update_environment_variable(key, value)
        except Exception as e:
            error_message = get_error_message(e)
            kind = getattr(e, "kind", None)
            if kind in _EXPECTED_ERROR_KINDS:
                logger.warning(f"Rejected update of {key!r}: {error_message}")
            else:
                logger.error(f"Update of {key!r} failed ({kind or type(e).__name__}): {error_message}")
            return f"Failed to update environment variable, error: {error_message}"

        return f"Successfully updated environment variable {key}"
