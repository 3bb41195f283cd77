"""
Error taxonomy for the QingLong client.

Every error carries an ErrorKind tag so callers can branch on the kind
instead of the concrete class.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INITIALIZATION = "initialization"
    BAD_REQUEST = "bad_request"
    ENV_NOT_FOUND = "env_not_found"
    REMOTE_API = "remote_api"
    AUTHENTICATION = "authentication"


DEFAULT_REMOTE_ERROR_MESSAGE = "Unknown error occurred"
INCOMPLETE_CONFIGURATION_MESSAGE = (
    "QingLong configuration is incomplete: "
    "QINGLONG_URL, QINGLONG_CLIENT_ID and QINGLONG_CLIENT_SECRET are required"
)


class QingLongError(Exception):
    """Base class for all QingLong client errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InitializationError(QingLongError):
    """Required QingLong configuration is missing."""

    kind = ErrorKind.INITIALIZATION

    def __init__(self, message: str = INCOMPLETE_CONFIGURATION_MESSAGE):
        super().__init__(message)


class BadRequestError(QingLongError):
    kind = ErrorKind.BAD_REQUEST


class EnvNotFoundError(QingLongError):
    """No remote environment variable has the requested name."""

    kind = ErrorKind.ENV_NOT_FOUND

    def __init__(self, key: str):
        super().__init__(f"Environment variable {key} not found")
        self.key = key


class RemoteAPIError(QingLongError):
    """The remote envelope reported a code other than 200."""

    kind = ErrorKind.REMOTE_API

    def __init__(self, message: str | None = None, code: int | None = None):
        super().__init__(message or DEFAULT_REMOTE_ERROR_MESSAGE)
        self.code = code


class AuthenticationError(RemoteAPIError):
    kind = ErrorKind.AUTHENTICATION
