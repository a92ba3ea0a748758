"""Tests for the Google OAuth boundary."""

import asyncio
from datetime import timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from conftest import NOW
from uneventful.core.errors import NetworkFailure, SessionExpired
from uneventful.core.oauth import GoogleOAuth, parse_token_response


def oauth_with(handler) -> GoogleOAuth:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleOAuth(client_id="client", client_secret="secret", http_client=client)


def test_parse_token_response():
    grant = parse_token_response(
        {"access_token": "abc", "expires_in": 1800, "refresh_token": "r1"}, now=NOW
    )

    assert grant.access_token == "abc"
    assert grant.expires_at == NOW + timedelta(seconds=1800)
    assert grant.refresh_token == "r1"


def test_parse_token_response_defaults_lifetime():
    grant = parse_token_response({"access_token": "abc"}, now=NOW)

    assert grant.expires_at == NOW + timedelta(hours=1)
    assert grant.refresh_token is None


def test_parse_token_response_requires_access_token():
    with pytest.raises(NetworkFailure):
        parse_token_response({"expires_in": 3600})


def test_refresh_keeps_refresh_token_when_not_rotated():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(parse_qs(request.content.decode()))
        return httpx.Response(200, json={"access_token": "new", "expires_in": 3599})

    grant = asyncio.run(oauth_with(handler).refresh("r1"))

    assert grant.access_token == "new"
    assert grant.refresh_token == "r1"
    assert seen["grant_type"] == ["refresh_token"]
    assert seen["client_id"] == ["client"]


def test_refresh_uses_rotated_refresh_token():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"access_token": "new", "expires_in": 3599, "refresh_token": "r2"}
        )

    grant = asyncio.run(oauth_with(handler).refresh("r1"))

    assert grant.refresh_token == "r2"


def test_invalid_grant_raises_session_expired():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Token has been expired or revoked."},
        )

    with pytest.raises(SessionExpired, match="invalid_grant"):
        asyncio.run(oauth_with(handler).refresh("r1"))


def test_transport_error_raises_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkFailure):
        asyncio.run(oauth_with(handler).refresh("r1"))


def test_server_error_raises_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(NetworkFailure):
        asyncio.run(oauth_with(handler).exchange_code("code", "https://app.example.com/cb"))


def test_exchange_code_posts_authorization_code():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(parse_qs(request.content.decode()))
        return httpx.Response(
            200, json={"access_token": "a", "expires_in": 3600, "refresh_token": "r"}
        )

    grant = asyncio.run(oauth_with(handler).exchange_code("code-1", "https://app.example.com/cb"))

    assert grant.refresh_token == "r"
    assert seen["grant_type"] == ["authorization_code"]
    assert seen["code"] == ["code-1"]
    assert seen["redirect_uri"] == ["https://app.example.com/cb"]


def test_revoke_tolerates_already_invalid_token():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_token"})

    asyncio.run(oauth_with(handler).revoke("r1"))
