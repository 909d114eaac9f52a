import urllib.parse
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from settings import Settings


class FakeTokenEndpoint:
    """Stand-in for the provider's /api/token endpoint, recording every call."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.payload: Any = {
            "access_token": "access-123",
            "token_type": "Bearer",
            "expires_in": 3600,
            "refresh_token": "refresh-456",
            "scope": "user-read-currently-playing",
        }
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_form(self) -> Dict[str, str]:
        body = self.requests[-1].content.decode("utf-8")
        return dict(urllib.parse.parse_qsl(body))


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        SPOTIFY_CLIENT_ID="client-id-123",
        SPOTIFY_CLIENT_SECRET="super-secret",
        REDIRECT_URI="http://localhost:8888/callback",
        FRONTEND_URI="http://localhost:3000",
        SCOPE="user-read-currently-playing user-read-private",
        PORT=8888,
        ORIGINS=frozenset({"http://localhost:3000"}),
        SPOTIFY_ACCOUNTS_URL="https://accounts.example.com",
        SPOTIFY_HTTP_TIMEOUT=10.0,
    )


@pytest.fixture()
def token_endpoint() -> FakeTokenEndpoint:
    return FakeTokenEndpoint()


@pytest.fixture()
def client(settings, token_endpoint) -> TestClient:
    app = create_app(settings, transport=token_endpoint.transport)
    return TestClient(app)


@pytest.fixture()
def split_location() -> Callable[[httpx.Response], urllib.parse.SplitResult]:
    def _split(response: httpx.Response) -> urllib.parse.SplitResult:
        assert response.status_code == 302
        return urllib.parse.urlsplit(response.headers["location"])

    return _split
