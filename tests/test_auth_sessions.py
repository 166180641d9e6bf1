from datetime import datetime, timedelta, timezone

import pytest

from advocat.auth.sessions import SESSIONS, USERS, SessionManager
from advocat.errors import AdvocatError, AuthenticationError


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def sessions(documents, clock):
    manager = SessionManager(documents, clock=clock)
    manager.register("Asha@Example.com", "s3cret")
    return manager


def test_password_is_hashed(sessions, documents):
    user = documents.find(USERS, "asha@example.com")
    assert user["password"] != "s3cret"


def test_duplicate_registration(sessions):
    with pytest.raises(AdvocatError) as exc:
        sessions.register("asha@example.com", "other")
    assert exc.value.status == 409


def test_login_and_validate(sessions):
    token = sessions.login("ASHA@example.com", "s3cret")
    status = sessions.validate(token)
    assert status.is_valid
    assert status.email == "asha@example.com"
    assert status.to_dict() == {"isValid": True, "email": "asha@example.com"}
    assert sessions.require(token) == "asha@example.com"


def test_bad_password(sessions):
    with pytest.raises(AuthenticationError):
        sessions.login("asha@example.com", "wrong")


def test_session_expires_after_seven_days(sessions, clock, documents):
    token = sessions.login("asha@example.com", "s3cret")
    clock.now += timedelta(days=6, hours=23)
    assert sessions.validate(token).is_valid
    clock.now += timedelta(hours=2)
    status = sessions.validate(token)
    assert not status.is_valid
    assert status.message == "Session expired"
    assert documents.find(SESSIONS, token) is None
    with pytest.raises(AuthenticationError):
        sessions.require(token)


def test_logout(sessions):
    token = sessions.login("asha@example.com", "s3cret")
    assert sessions.logout(token)
    assert not sessions.validate(token).is_valid
    assert not sessions.logout(token)
    assert sessions.validate(None).message == "No token provided"
