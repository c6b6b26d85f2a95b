"""Tests for the SessionManager — session-scoped OTP state."""

from __future__ import annotations

import pytest

from otp_login.services.session_manager import SessionManager
from otp_login.storage.otp_store import OtpStore


@pytest.fixture
def sessions(settings, analytics, clock) -> SessionManager:
    return SessionManager(analytics=analytics, settings=settings, clock=clock)


def test_open_creates_distinct_sessions(sessions):
    first = sessions.open()
    second = sessions.open()

    assert first.session_id != second.session_id
    assert sessions.active_count == 2


def test_get_unknown_session_returns_none(sessions):
    assert sessions.get("missing") is None
    assert sessions.active_count == 0


def test_get_with_create(sessions):
    session = sessions.get("abc", create=True)
    assert session.session_id == "abc"
    assert sessions.get("abc") is session


def test_otp_manager_is_built_once(sessions):
    session = sessions.open()
    assert session.otp_manager is session.otp_manager


def test_codes_do_not_leak_between_sessions(sessions, settings):
    first = sessions.open()
    second = sessions.open()

    first.otp_manager.generate("a@x.com")

    assert second.otp_manager.remaining_seconds("a@x.com") == 0
    assert OtpStore(first.storage, settings).get("a@x.com") is not None


def test_clear_discards_otp_state(sessions):
    session = sessions.open()
    session.otp_manager.generate("a@x.com")

    sessions.clear(session.session_id)

    assert sessions.get(session.session_id) is None
    assert len(session.storage) == 0


def test_clear_unknown_session_is_noop(sessions):
    sessions.clear("missing")
    assert sessions.active_count == 0


def test_sessions_share_analytics(sessions, analytics):
    sessions.open().otp_manager.generate("a@x.com")
    sessions.open().otp_manager.generate("b@x.com")

    assert sessions.analytics is analytics
    assert len(analytics.recent_events()) == 2


def test_authentication_and_duration(sessions, clock):
    session = sessions.open()
    assert not session.is_authenticated
    assert session.duration_seconds() == 0

    session.mark_authenticated("a@x.com")
    clock.advance(42_500)

    assert session.is_authenticated
    assert session.duration_seconds() == 42
