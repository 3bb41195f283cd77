"""
QingLong panel integration.

Session token management and the environment variable API client.
"""

from .client import (
    QingLongClient,
    build_qinglong_client,
    initialize_qinglong_client,
    get_qinglong_client,
    close_qinglong_client,
)
from .errors import (
    ErrorKind,
    QingLongError,
    InitializationError,
    BadRequestError,
    EnvNotFoundError,
    RemoteAPIError,
    AuthenticationError,
)
from .models import Credentials, EnvironmentVariable
from .session import Session, SessionTokenManager

__all__ = [
    "QingLongClient",
    "build_qinglong_client",
    "initialize_qinglong_client",
    "get_qinglong_client",
    "close_qinglong_client",
    "ErrorKind",
    "QingLongError",
    "InitializationError",
    "BadRequestError",
    "EnvNotFoundError",
    "RemoteAPIError",
    "AuthenticationError",
    "Credentials",
    "EnvironmentVariable",
    "Session",
    "SessionTokenManager",
]
