"""
QingLong open API client.

Reads and updates panel environment variables. Every authenticated call
goes through the SessionTokenManager first and validates the response
envelope with the shared routine in responses.py.
"""

import logging
from typing import Optional, List

import httpx

from app.config import Settings, get_settings
from . import urls
from .errors import BadRequestError, EnvNotFoundError, InitializationError
from .models import Credentials, EnvironmentVariable, UpdateEnvRequest
from .responses import parse_envelope
from .session import SessionTokenManager

logger = logging.getLogger(__name__)


class QingLongClient:
    """
    Client for the QingLong environment variable endpoints.

    The session manager is created by the client unless one is injected.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: Optional[httpx.AsyncClient] = None,
        session_manager: Optional[SessionTokenManager] = None,
        timeout: float = 30.0,
    ):
        self.credentials = credentials
        self.http = http_client or httpx.AsyncClient(timeout=timeout)
        self.session_manager = session_manager or SessionTokenManager(credentials, self.http)

    def _auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.session_manager.token}"}

    async def list_environment_variables(self) -> List[EnvironmentVariable]:
        """Call GET /open/envs and return every variable."""
        await self.session_manager.ensure_valid_session()

        response = await self.http.get(
            f"{self.credentials.base_url}{urls.ENV}",
            headers=self._auth_headers()
        )
        envelope = parse_envelope(response)
        return [EnvironmentVariable.model_validate(item) for item in envelope.data or []]

    async def list_environment_variable_names(self) -> List[str]:
        variables = await self.list_environment_variables()
        return [env.name for env in variables]

    async def update_environment_variable(self, key: str, value: str) -> None:
        """
        Set the value of the variable named `key`.

        The variable id is looked up from a fresh list on every call. When
        several variables share the name, the first one is updated.
        """
        if not key or not value:
            raise BadRequestError("Malformed update message, expected format: key=value")

        await self.session_manager.ensure_valid_session()

        variables = await self.list_environment_variables()
        target = next((env for env in variables if env.name == key), None)
        if target is None:
            raise EnvNotFoundError(key)

        request = UpdateEnvRequest(id=target.id, name=target.name, value=value)
        response = await self.http.put(
            f"{self.credentials.base_url}{urls.ENV}",
            json=request.model_dump(),
            headers=self._auth_headers()
        )
        parse_envelope(response)
        logger.info(f"Updated QingLong environment variable {key} (id={target.id})")

    async def close(self):
        """Close HTTP client."""
        await self.http.aclose()


def build_qinglong_client(settings: Settings) -> QingLongClient:
    """Build a client from settings, raising InitializationError if incomplete."""
    if not settings.qinglong_url or not settings.qinglong_client_id or not settings.qinglong_client_secret:
        raise InitializationError()

    credentials = Credentials(
        base_url=settings.qinglong_url.rstrip("/"),
        client_id=settings.qinglong_client_id,
        client_secret=settings.qinglong_client_secret,
    )
    return QingLongClient(credentials, timeout=settings.http_timeout_seconds)


# Global instance
_qinglong_client: Optional[QingLongClient] = None


def initialize_qinglong_client(settings: Optional[Settings] = None) -> QingLongClient:
    """Create the process-wide client (call on startup)."""
    global _qinglong_client
    _qinglong_client = build_qinglong_client(settings or get_settings())
    return _qinglong_client


def get_qinglong_client() -> QingLongClient:
    """Get or create the QingLong client singleton."""
    global _qinglong_client
    if _qinglong_client is None:
        _qinglong_client = build_qinglong_client(get_settings())
    return _qinglong_client


async def close_qinglong_client() -> None:
    global _qinglong_client
    if _qinglong_client is not None:
        await _qinglong_client.close()
        _qinglong_client = None
