"""
Helpers for turning exceptions into user-facing text.
"""

import httpx


def get_error_message(error: BaseException) -> str:
    """
    Human-readable text for an exception.

    Uses the exception's own message when it has one, otherwise the class
    name, so replies never show a raw repr.
    """
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code} from {error.request.url.host}"

    message = getattr(error, "message", None) or str(error)
    if not message:
        return type(error).__name__
    return message
