"""Tests for SessionRegistry."""

import asyncio
from datetime import timedelta

import pytest

from conftest import NOW, FakeIssuer
from uneventful.core.errors import AuthFailure, NetworkFailure
from uneventful.core.tokens import TokenGrant, TokenState
from uneventful.models.events import Calendar, EventKey
from uneventful.services.sessions import SessionRegistry
from uneventful.services.workspace import Workspace


class Clock:
    def __init__(self):
        self.now = NOW

    def __call__(self):
        return self.now


def grant(token="access"):
    return TokenGrant(access_token=token, expires_at=NOW + timedelta(hours=1), refresh_token="r")


def make_registry(clock=None, issuer=None):
    return SessionRegistry(
        issuer or FakeIssuer(),
        secret="test-secret",
        resume_window=timedelta(minutes=15),
        clock=clock or Clock(),
    )


def test_issued_token_resolves_to_session():
    registry = make_registry()
    session = registry.create(grant())

    token = registry.issue_token(session)

    assert registry.resolve(token) is session
    assert "access" not in token


def test_forged_signature_is_rejected():
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)
    session_id, _, _ = token.partition(".")

    with pytest.raises(AuthFailure):
        registry.resolve(f"{session_id}.forged")
    with pytest.raises(AuthFailure):
        registry.resolve("garbage")


def test_token_from_other_secret_is_rejected():
    registry = make_registry()
    other = SessionRegistry(FakeIssuer(), secret="other-secret")
    session = registry.create(grant())

    assert other.lookup(registry.issue_token(session)) is None


def test_expired_session_does_not_resolve():
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)

    registry.expire(session)

    assert session.tokens.state is TokenState.UNAUTHENTICATED
    with pytest.raises(AuthFailure):
        registry.resolve(token)


def test_resume_keeps_workspace_and_selection():
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)
    session.workspace.selection.toggle(EventKey("primary", "a"))
    registry.expire(session)

    resumed = asyncio.run(registry.resume(token, grant("fresh")))

    assert resumed is session
    assert registry.resolve(token) is session
    assert session.workspace.selection.selected == frozenset({EventKey("primary", "a")})


def test_expired_sessions_are_pruned_after_resume_window():
    clock = Clock()
    registry = make_registry(clock=clock)
    session = registry.create(grant())
    token = registry.issue_token(session)
    registry.expire(session)

    clock.now = NOW + timedelta(minutes=16)

    assert asyncio.run(registry.resume(token, grant())) is None
    assert len(registry) == 0


def test_logout_revokes_and_forgets():
    issuer = FakeIssuer()
    registry = make_registry(issuer=issuer)
    session = registry.create(grant())
    token = registry.issue_token(session)

    asyncio.run(registry.logout(session))

    assert issuer.revoked == ["r"]
    assert registry.lookup(token) is None


def test_logout_survives_revoke_network_failure():
    class FailingIssuer(FakeIssuer):
        async def revoke(self, token):
            raise NetworkFailure("offline")

    registry = make_registry(issuer=FailingIssuer())
    session = registry.create(grant())

    asyncio.run(registry.logout(session))

    assert len(registry) == 0


def test_resume_as_same_account_keeps_loaded_workspace(fake_service, window):
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)
    session.workspace = Workspace(fake_service, window=window)
    asyncio.run(session.workspace.load_calendars())
    session.workspace.toggle_event(EventKey("primary@example.com", "a"))
    registry.expire(session)

    asyncio.run(registry.resume(token, grant("fresh")))

    assert session.workspace.selection.selected == frozenset({EventKey("primary@example.com", "a")})


def test_resume_as_other_account_resets_workspace(fake_service, window):
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)
    session.workspace = Workspace(fake_service, window=window)
    asyncio.run(session.workspace.load_calendars())
    session.workspace.toggle_event(EventKey("primary@example.com", "a"))
    registry.expire(session)
    fake_service.calendars = [Calendar(id="someone@example.com", summary="Someone", primary=True)]

    resumed = asyncio.run(registry.resume(token, grant("fresh")))

    assert resumed is session
    assert registry.resolve(token) is session
    assert len(session.workspace.selection) == 0
    assert session.workspace.calendars == []


def test_resume_stays_expired_when_account_check_fails(fake_service, window):
    registry = make_registry()
    session = registry.create(grant())
    token = registry.issue_token(session)
    session.workspace = Workspace(fake_service, window=window)
    asyncio.run(session.workspace.load_calendars())
    registry.expire(session)

    async def offline():
        raise NetworkFailure("timed out")

    fake_service.list_calendars = offline

    with pytest.raises(NetworkFailure):
        asyncio.run(registry.resume(token, grant("fresh")))
    with pytest.raises(AuthFailure):
        registry.resolve(token)
