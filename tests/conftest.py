"""
Shared fixtures: a fake WR25 server behind httpx.MockTransport.

FakeWR25 answers the token and verify endpoints from canned data so tests
never touch the network. Every request it sees is kept in `requests`.
"""

from urllib.parse import parse_qsl

import httpx
import pytest

from wr25_auth.wr25 import TOKEN_URL, VERIFY_URL, WR25Provider

CLIENT_ID = "client-123"
CLIENT_SECRET = "s3cret"
CALLBACK_URL = "https://app.example.com/auth/authwr25/callback"


class FakeWR25:
    """Canned WR25 endpoints. Tweak attributes per test before making calls."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.verify_status = 200
        self.verify_json = {
            "CharacterID": 12345,
            "CharacterName": "Jane Doe",
            "ExpiresOn": "2026-10-17T12:00:00",
            "Scopes": "publicData",
            "TokenType": "Character",
            "CharacterOwnerHash": "abc=",
            "groups": ["alpha", "beta"],
        }
        self.verify_body = None
        self.valid_codes = {"good-code"}
        self.valid_refresh_tokens = {"good-refresh"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        if url == VERIFY_URL:
            return self._verify(request)
        if url == TOKEN_URL:
            return self._token(request)
        return httpx.Response(404)

    def _verify(self, request: httpx.Request) -> httpx.Response:
        if self.verify_body is not None:
            return httpx.Response(self.verify_status, content=self.verify_body)
        return httpx.Response(self.verify_status, json=self.verify_json)

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = dict(parse_qsl(request.content.decode()))
        grant_type = form.get("grant_type")
        if grant_type == "authorization_code" and form.get("code") in self.valid_codes:
            return httpx.Response(
                200,
                json={
                    "access_token": "access-1",
                    "token_type": "Bearer",
                    "expires_in": 1200,
                    "refresh_token": "refresh-1",
                },
            )
        if grant_type == "refresh_token" and form.get("refresh_token") in self.valid_refresh_tokens:
            return httpx.Response(
                200,
                json={
                    "access_token": "access-2",
                    "token_type": "Bearer",
                    "expires_in": 1200,
                    "refresh_token": "refresh-2",
                },
            )
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "bad grant"})

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).split("?")[0] == url]


@pytest.fixture
def fake_wr25():
    return FakeWR25()


@pytest.fixture
def transport(fake_wr25):
    return httpx.MockTransport(fake_wr25.handler)


@pytest.fixture
def http_client(transport):
    return httpx.AsyncClient(transport=transport)


@pytest.fixture
def make_provider(http_client, transport):
    """Factory for providers wired to the fake server."""

    def _make(*scopes: str, **kwargs) -> WR25Provider:
        kwargs.setdefault("http_client", http_client)
        kwargs.setdefault("oauth_client_kwargs", {"transport": transport})
        return WR25Provider(CLIENT_ID, CLIENT_SECRET, CALLBACK_URL, *scopes, **kwargs)

    return _make
