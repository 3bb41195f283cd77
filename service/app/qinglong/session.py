"""
Session token lifecycle for the QingLong open API.

The manager owns the bearer token and its expiry. Callers ask for a valid
session before each authenticated call; the manager logs in again when the
token is missing or within STALENESS_SKEW_MS of expiring.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import httpx

from . import urls
from .errors import AuthenticationError
from .models import Credentials, LoginResult
from .responses import parse_envelope

logger = logging.getLogger(__name__)

STALENESS_SKEW_MS = 5000


def _wall_clock_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class Session:
    token: str
    expires_at_ms: float

    def is_stale(self, now_ms: float) -> bool:
        return now_ms >= self.expires_at_ms - STALENESS_SKEW_MS


class SessionTokenManager:
    """
    Holds the current QingLong session and refreshes it on demand.

    Concurrent refreshes are coalesced: the first caller logs in while the
    others wait on the lock, then find a fresh session and return.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: httpx.AsyncClient,
        clock: Callable[[], float] = _wall_clock_ms,
    ):
        self.credentials = credentials
        self.http = http_client
        self.clock = clock
        self._session: Optional[Session] = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token(self) -> str:
        return self._session.token if self._session else ""

    def needs_refresh(self) -> bool:
        return self._session is None or self._session.is_stale(self.clock())

    async def ensure_valid_session(self) -> Session:
        """Log in if the session is absent or stale, otherwise no-op."""
        if not self.needs_refresh():
            return self._session

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.needs_refresh():
                await self.login()
        return self._session

    async def login(self) -> Session:
        """
        Exchange the client credentials for a new token.

        On failure raises AuthenticationError and keeps the previous session.
        """
        response = await self.http.get(
            f"{self.credentials.base_url}{urls.LOGIN}",
            params={
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
            },
        )
        envelope = parse_envelope(response, error_cls=AuthenticationError)
        result = LoginResult.model_validate(envelope.data)

        self._session = Session(
            token=result.token,
            expires_at_ms=self.clock() + result.expiration * 1000,
        )

        expires_at = datetime.fromtimestamp(self._session.expires_at_ms / 1000)
        logger.info(f"Refreshed QingLong token, valid until {expires_at.isoformat(timespec='seconds')}")
        return self._session
