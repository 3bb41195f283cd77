"""
Tests for the DingTalk stream bridge.
"""

import asyncio
from types import SimpleNamespace

import pytest
import dingtalk_stream
from dingtalk_stream import AckMessage

from app.config import Settings
from app.dingtalk_bot import bot
from app.dingtalk_bot.router import CommandRouter
from app.qinglong import InitializationError

WEBHOOK = "https://oapi.dingtalk.com/robot/sendBySession?session=xyz"


def make_callback(content="LIST", message_id="stream-msg-1"):
    data = {
        "conversationId": "cid-1",
        "chatbotCorpId": "corp",
        "chatbotUserId": "bot-user",
        "msgId": "msg-abc",
        "senderNick": "Alice",
        "isAdmin": False,
        "senderStaffId": "staff-1",
        "sessionWebhookExpiredTime": 1700000000000,
        "createAt": 1700000000000,
        "senderCorpId": "corp",
        "conversationType": "1",
        "senderId": "sender-1",
        "sessionWebhook": WEBHOOK,
        "robotCode": "robot",
        "msgtype": "text",
        "text": {"content": content},
    }
    return SimpleNamespace(data=data, headers=SimpleNamespace(message_id=message_id))


class FakeStreamClient:
    def get_access_token(self):
        return "stream-token"


class TestInboundEvent:

    def test_converts_callback(self):
        event = bot.to_inbound_event(make_callback(" UPDATE#FOO=bar ", message_id="m-1"))

        assert event.command_text == " UPDATE#FOO=bar "
        assert event.sender_id == "staff-1"
        assert event.reply_channel == WEBHOOK
        assert event.correlation_id == "m-1"


class TestStreamTransport:

    @pytest.mark.asyncio
    async def test_access_token_comes_from_client(self):
        transport = bot.StreamTransport(FakeStreamClient())
        assert await transport.get_access_token() == "stream-token"

    @pytest.mark.asyncio
    async def test_acknowledge_records_payload(self):
        transport = bot.StreamTransport(FakeStreamClient())
        await transport.acknowledge("m-1", {"errcode": 0})
        assert transport.acknowledgements == {"m-1": {"errcode": 0}}


class TestEnvCommandHandler:

    @pytest.mark.asyncio
    async def test_process_returns_ack_with_reply_response(self, monkeypatch, qinglong_client):
        replies = []

        async def fake_sender(webhook, payload, access_token):
            replies.append((webhook, payload, access_token))
            return {"errcode": 0}

        monkeypatch.setattr(bot, "get_qinglong_client", lambda: qinglong_client)
        monkeypatch.setattr(
            bot, "CommandRouter",
            lambda client, transport: CommandRouter(client, transport, reply_sender=fake_sender)
        )

        handler = bot.EnvCommandHandler()
        handler.dingtalk_client = FakeStreamClient()

        status, payload = await handler.process(make_callback("LIST"))

        assert status == AckMessage.STATUS_OK
        assert payload == {"errcode": 0}
        assert replies[0][0] == WEBHOOK
        assert replies[0][2] == "stream-token"


class TestRegistration:

    def test_missing_credentials_skip_registration(self):
        assert bot.register_dingtalk_stream_client(Settings(
            _env_file=None, dingtalk_client_id="", dingtalk_client_secret=""
        )) is None
        assert bot.is_bot_registered() is False

    @pytest.mark.asyncio
    async def test_registers_handler_when_configured(self):
        client = bot.register_dingtalk_stream_client(Settings(
            _env_file=None,
            dingtalk_client_id="ding-id",
            dingtalk_client_secret="ding-secret",
        ))

        assert client is not None
        assert bot.is_bot_registered() is True

        await bot.shutdown_bot()
        assert bot.is_bot_registered() is False


class TestHandlerAlwaysAcknowledges:

    @pytest.mark.asyncio
    async def test_malformed_callback_is_acknowledged(self):
        handler = bot.EnvCommandHandler()
        handler.dingtalk_client = FakeStreamClient()
        callback = SimpleNamespace(data=make_callback().data, headers=None)

        assert await handler.process(callback) == (AckMessage.STATUS_OK, {})

    @pytest.mark.asyncio
    async def test_missing_qinglong_configuration_is_acknowledged(self, monkeypatch):
        def fail():
            raise InitializationError()

        monkeypatch.setattr(bot, "get_qinglong_client", fail)
        handler = bot.EnvCommandHandler()
        handler.dingtalk_client = FakeStreamClient()

        assert await handler.process(make_callback("LIST")) == (AckMessage.STATUS_OK, {})


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_shutdown_finishes_while_stream_is_reconnecting(self, monkeypatch):
        """The SDK loop never exits on its own; shutdown must not wait for it forever."""
        monkeypatch.setattr(bot, "get_settings", lambda: Settings(
            _env_file=None,
            dingtalk_client_id="ding-id",
            dingtalk_client_secret="ding-secret",
        ))
        monkeypatch.setattr(dingtalk_stream.DingTalkStreamClient, "open_connection", lambda self: None)

        await bot.start_bot()
        assert bot.is_bot_registered() is True

        await asyncio.wait_for(bot.shutdown_bot(timeout=0.2), timeout=3)

        assert bot.is_bot_registered() is False

    @pytest.mark.asyncio
    async def test_shutdown_without_start_is_noop(self):
        await asyncio.wait_for(bot.shutdown_bot(), timeout=1)
        assert bot.is_bot_registered() is False
