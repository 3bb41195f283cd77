"""
DingTalk robot API helpers for sending replies.

Replies go to the per-conversation session webhook delivered with each
message, authenticated with the robot's access token.
"""

import httpx
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

REPLY_TITLE = "Execution result"
ACCESS_TOKEN_HEADER = "x-acs-dingtalk-access-token"


class MarkdownContent(BaseModel):
    title: str
    text: str


class AtTarget(BaseModel):
    at_user_ids: list[str] = Field(default_factory=list, alias="atUserIds")

    model_config = {"populate_by_name": True}


class DingTalkMessage(BaseModel):
    msgtype: str = "markdown"
    markdown: MarkdownContent
    at: AtTarget = Field(default_factory=AtTarget)


def build_reply_message(text: str, sender_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a markdown reply payload, mentioning the sender when known.
    """
    message = DingTalkMessage(
        markdown=MarkdownContent(title=REPLY_TITLE, text=text),
        at=AtTarget(at_user_ids=[sender_id] if sender_id else []),
    )
    return message.model_dump(by_alias=True)


async def send_reply(
    session_webhook: str,
    payload: Dict[str, Any],
    access_token: str,
    http_client: Optional[httpx.AsyncClient] = None
) -> Dict[str, Any]:
    """
    POST a reply payload to a session webhook.

    Args:
        session_webhook: Webhook URL from the inbound message
        payload: Message body from build_reply_message
        access_token: Robot access token

    Returns:
        Decoded response body
    """
    headers = {ACCESS_TOKEN_HEADER: access_token}

    if http_client is not None:
        response = await http_client.post(session_webhook, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()

    async with httpx.AsyncClient() as client:
        response = await client.post(session_webhook, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()
