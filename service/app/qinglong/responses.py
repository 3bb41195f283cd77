"""
Response validation shared by every QingLong call.

QingLong answers with HTTP statuses below 500 even for failures and puts the
real outcome in the envelope's `code` field, so every operation funnels its
response through `parse_envelope`.
"""

from typing import Type

import httpx

from .errors import RemoteAPIError
from .models import Envelope


def ensure_successful_response(
    envelope: Envelope,
    error_cls: Type[RemoteAPIError] = RemoteAPIError
) -> Envelope:
    """Raise `error_cls` unless the envelope code is 200."""
    if envelope.code != 200:
        raise error_cls(envelope.message, code=envelope.code)
    return envelope


def parse_envelope(
    response: httpx.Response,
    error_cls: Type[RemoteAPIError] = RemoteAPIError
) -> Envelope:
    """
    Decode and validate an HTTP response.

    5xx statuses raise httpx.HTTPStatusError. A body that is not JSON or not
    an envelope raises the decoding error unchanged.
    """
    if response.status_code >= 500:
        response.raise_for_status()

    envelope = Envelope.model_validate(response.json())
    return ensure_successful_response(envelope, error_cls)
