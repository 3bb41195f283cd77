"""
Shared fixtures: a fake QingLong panel served through httpx.MockTransport
and a controllable clock.
"""

import asyncio
import json

import httpx
import pytest

from app.qinglong import Credentials, QingLongClient, SessionTokenManager

BASE_URL = "http://qinglong.test"


class FakeClock:
    """Callable returning epoch milliseconds, moved by hand."""

    def __init__(self, now_ms: float = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class FakeQingLong:
    """In-memory QingLong open API with call counters."""

    def __init__(self, envs=None, token="t1", expiration=100):
        self.envs = list(envs or [])
        self.token = token
        self.expiration = expiration

        # Override a whole response body per endpoint: (status, json)
        self.login_response = None
        self.list_response = None
        self.update_response = None

        self.login_calls = 0
        self.list_calls = 0
        self.update_calls = 0
        self.updates = []
        self.auth_headers = []
        self.login_params = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path == "/open/auth/token" and request.method == "GET":
            self.login_calls += 1
            self.login_params.append(dict(request.url.params))
            # Yield so concurrent callers overlap with an in-flight login
            await asyncio.sleep(0.01)
            if self.login_response:
                return httpx.Response(self.login_response[0], json=self.login_response[1])
            return httpx.Response(200, json={
                "code": 200,
                "data": {"token": self.token, "token_type": "Bearer", "expiration": self.expiration},
            })

        if path == "/open/envs" and request.method == "GET":
            self.list_calls += 1
            self.auth_headers.append(request.headers.get("Authorization"))
            if self.list_response:
                return httpx.Response(self.list_response[0], json=self.list_response[1])
            return httpx.Response(200, json={"code": 200, "data": self.envs})

        if path == "/open/envs" and request.method == "PUT":
            self.update_calls += 1
            self.auth_headers.append(request.headers.get("Authorization"))
            body = json.loads(request.content)
            self.updates.append(body)
            if self.update_response:
                return httpx.Response(self.update_response[0], json=self.update_response[1])
            for env in self.envs:
                if env["id"] == body["id"]:
                    env["value"] = body["value"]
            return httpx.Response(200, json={"code": 200, "data": body})

        return httpx.Response(404, json={"code": 404, "message": "Not Found"})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_qinglong():
    return FakeQingLong(envs=[
        {"id": 1, "name": "FOO", "value": "old", "status": 0, "remarks": ""},
        {"id": 2, "name": "JD_COOKIE", "value": "pt_key=abc", "status": 0},
    ])


@pytest.fixture
def credentials():
    return Credentials(base_url=BASE_URL, client_id="cid", client_secret="secret")


@pytest.fixture
def http_client(fake_qinglong):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_qinglong.handler))


@pytest.fixture
def session_manager(credentials, http_client, clock):
    return SessionTokenManager(credentials, http_client, clock=clock)


@pytest.fixture
def qinglong_client(credentials, http_client, session_manager):
    return QingLongClient(credentials, http_client=http_client, session_manager=session_manager)
