# tests/conftest.py
import base64
import json
from typing import Any, Callable

import httpx
import pytest

from token_auth import TokenAuthSettings, TokenAuthenticator
from token_auth.adapters.httpx.transport import HttpxTransport

BASE_URL = "https://auth.example.com"
NOW = 1_700_000_000.0


def make_token(claims: dict[str, Any]) -> str:
    """header.payload.signature with a base64url (unpadded) JSON payload."""
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return f"eyJhbGciOiJIUzI1NiJ9.{payload}.c2lnbmF0dXJl"


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubServer:
    """
    httpx.MockTransport handler: path -> (status, json body | text | callable).
    Records every request it sees.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Any] = {}

    def route(self, path: str, status: int = 200, json_body: Any = None, text: str | None = None) -> None:
        self.routes[path] = (status, json_body, text)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.routes.get(request.url.path)
        if entry is None:
            return httpx.Response(404, json={"detail": "Not found"})
        if callable(entry):
            return entry(request)
        status, json_body, text = entry
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def server() -> StubServer:
    return StubServer()


@pytest.fixture
def settings() -> TokenAuthSettings:
    return TokenAuthSettings(base_url=BASE_URL, inert_timers=True)


@pytest.fixture
def make_authenticator(server: StubServer, clock: FakeClock) -> Callable[..., TokenAuthenticator]:
    def _make(settings: TokenAuthSettings, **kwargs: Any) -> TokenAuthenticator:
        client = httpx.AsyncClient(
            base_url=settings.base_url or "",
            transport=httpx.MockTransport(kwargs.pop("handler", server)),
        )
        kwargs.setdefault("clock", clock)
        return TokenAuthenticator(settings, HttpxTransport(client=client), **kwargs)

    return _make


@pytest.fixture
def authenticator(settings, make_authenticator) -> TokenAuthenticator:
    return make_authenticator(settings)
