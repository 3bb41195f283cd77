"""
DingTalk Stream bot.

Uses the dingtalk-stream SDK: the SDK keeps the websocket open, decodes
robot callbacks and sends back the acknowledgement we return from the
handler. The SDK connection loop runs in its own thread and event loop.
"""

import asyncio
import threading
from typing import Any, Dict, Optional

import dingtalk_stream
from dingtalk_stream import AckMessage

from app.config import Settings, get_settings
from app.qinglong import get_qinglong_client, close_qinglong_client
from .logging_config import bot_logger as logger
from .router import CommandRouter, InboundChatEvent


class StreamTransport:
    """
    ChatTransport backed by a DingTalkStreamClient.

    The SDK sends the acknowledgement itself from the handler's return value,
    so acknowledge() only records the payload for that message id.
    """

    def __init__(self, client: dingtalk_stream.DingTalkStreamClient):
        self.client = client
        self.acknowledgements: Dict[str, Dict[str, Any]] = {}

    async def get_access_token(self) -> str:
        # SDK call is blocking (requests), keep it off the event loop
        return await asyncio.to_thread(self.client.get_access_token)

    async def acknowledge(self, message_id: str, payload: Dict[str, Any]) -> None:
        self.acknowledgements[message_id] = payload


def to_inbound_event(callback: dingtalk_stream.CallbackMessage) -> InboundChatEvent:
    """Convert a robot callback into an InboundChatEvent."""
    message = dingtalk_stream.ChatbotMessage.from_dict(callback.data)
    text = getattr(message, "text", None)

    return InboundChatEvent(
        command_text=getattr(text, "content", None) or "",
        sender_id=message.sender_staff_id or "",
        reply_channel=message.session_webhook,
        correlation_id=callback.headers.message_id,
    )


class EnvCommandHandler(dingtalk_stream.ChatbotHandler):
    """Routes robot messages to the CommandRouter."""

    async def process(self, callback: dingtalk_stream.CallbackMessage):
        try:
            event = to_inbound_event(callback)
            transport = StreamTransport(self.dingtalk_client)
            router = CommandRouter(get_qinglong_client(), transport)
        except Exception as e:
            # Still acknowledge, otherwise DingTalk redelivers after 60 seconds
            logger.error(f"Failed to prepare message handling: {e}", exc_info=True)
            return AckMessage.STATUS_OK, {}

        await router.handle_event(event)
        return AckMessage.STATUS_OK, transport.acknowledgements.get(event.correlation_id, {})


SHUTDOWN_TIMEOUT_SECONDS = 5.0

# Global client instance (registered once)
_stream_client: Optional[dingtalk_stream.DingTalkStreamClient] = None
_stream_thread: Optional[threading.Thread] = None
_stream_loop: Optional[asyncio.AbstractEventLoop] = None


def register_dingtalk_stream_client(
    settings: Optional[Settings] = None
) -> Optional[dingtalk_stream.DingTalkStreamClient]:
    """
    Create the stream client and register the robot handler.

    Returns None (and logs a warning) when DingTalk credentials are missing.
    """
    global _stream_client
    settings = settings or get_settings()

    if not settings.dingtalk_client_id or not settings.dingtalk_client_secret:
        logger.warning("DingTalk bot configuration is incomplete, skipping bot registration")
        return None

    credential = dingtalk_stream.Credential(settings.dingtalk_client_id, settings.dingtalk_client_secret)
    client = dingtalk_stream.DingTalkStreamClient(credential)
    client.register_callback_handler(dingtalk_stream.ChatbotMessage.TOPIC, EnvCommandHandler())

    _stream_client = client
    logger.info("DingTalk stream client registered")
    return client


def is_bot_registered() -> bool:
    return _stream_client is not None


def _run_stream_client(client: dingtalk_stream.DingTalkStreamClient) -> None:
    """
    Thread target: run the SDK connection loop on a dedicated event loop.

    The SDK reconnects forever, swallows cancellation and sleeps synchronously
    between attempts, so it must not share the service's event loop.
    """
    global _stream_loop
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    _stream_loop = loop
    try:
        loop.run_until_complete(client.start())
    except Exception as e:
        logger.error(f"DingTalk stream loop stopped: {e}", exc_info=True)
    finally:
        # The QingLong client did its I/O on this loop, close it here too
        loop.run_until_complete(close_qinglong_client())
        loop.close()
        _stream_loop = None


async def start_bot() -> None:
    """
    Register the bot and run the stream connection in a background thread.
    """
    global _stream_thread
    client = register_dingtalk_stream_client()
    if client is None:
        return

    _stream_thread = threading.Thread(
        target=_run_stream_client,
        args=(client,),
        name="dingtalk-stream",
        daemon=True,
    )
    _stream_thread.start()
    logger.info("DingTalk bot started")


async def shutdown_bot(timeout: Optional[float] = None) -> None:
    """
    Stop the stream connection (call on shutdown).

    Closes the websocket and waits at most `timeout` seconds for the stream
    thread. A thread still reconnecting after that is left to die with the
    process (it is a daemon).
    """
    global _stream_client, _stream_thread
    timeout = SHUTDOWN_TIMEOUT_SECONDS if timeout is None else timeout

    websocket = getattr(_stream_client, "websocket", None)
    loop = _stream_loop
    if websocket is not None and loop is not None and not loop.is_closed():
        asyncio.run_coroutine_threadsafe(websocket.close(), loop)

    if _stream_thread is not None:
        await asyncio.to_thread(_stream_thread.join, timeout)
        if _stream_thread.is_alive():
            logger.warning(f"DingTalk stream thread still running after {timeout}s, abandoning it")
        else:
            logger.info("DingTalk bot shut down")

    _stream_thread = None
    _stream_client = None
