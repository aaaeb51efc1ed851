"""Tests for the auth gate."""

from autostock.domain.auth import AuthGate
from autostock.domain.entities import Session

SESSION = Session(user_id="u1")


def test_demo_mode_always_permits():
    gate = AuthGate(backend_configured=True, demo_mode=True)
    assert gate.permits(None) is True
    assert gate.allows_remote(SESSION) is False


def test_missing_session_with_backend_denied():
    gate = AuthGate(backend_configured=True)
    assert gate.permits(None) is False
    assert gate.permits(SESSION) is True


def test_no_backend_permits_without_session():
    gate = AuthGate(backend_configured=False)
    assert gate.permits(None) is True
    assert gate.allows_remote(None) is False
    assert gate.allows_remote(SESSION) is False


def test_remote_requires_session_and_backend():
    gate = AuthGate(backend_configured=True)
    assert gate.allows_remote(SESSION) is True
    assert gate.allows_remote(None) is False


def test_decision_follows_current_mode():
    gate = AuthGate(backend_configured=True)
    assert gate.permits(None) is False
    gate.demo_mode = True
    assert gate.permits(None) is True
