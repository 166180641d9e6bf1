"""Email/password accounts and expiring session tokens."""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from advocat.errors import AdvocatError, AuthenticationError
from advocat.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"
SESSIONS = "sessions"
DEFAULT_TTL = timedelta(days=7)


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class SessionStatus:
    is_valid: bool
    email: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self):
        out = {"isValid": self.is_valid}
        if self.email:
            out["email"] = self.email
        if self.message:
            out["message"] = self.message
        return out


class SessionManager:
    def __init__(self, store: DocumentStore, ttl: timedelta = DEFAULT_TTL,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def _normalise_email(email: str) -> str:
        return (email or "").strip().lower()

    def register(self, email: str, password: str) -> None:
        email = self._normalise_email(email)
        if not email or not password:
            raise AdvocatError("Email and password are required", status=400, code="validation_failed")
        if self.store.find(USERS, email):
            raise AdvocatError("An account with this email already exists", status=409, code="already_exists")
        self.store.upsert(USERS, email, {
            "email": email,
            "password": generate_password_hash(password),
            "created_at": _iso(self.clock()),
        })
        logger.info(f"[auth] Registered {email}")

    def login(self, email: str, password: str) -> str:
        email = self._normalise_email(email)
        if not email or not password:
            raise AdvocatError("Email and password are required", status=400, code="validation_failed")
        user = self.store.find(USERS, email)
        if not user or not check_password_hash(user.get("password", ""), password):
            raise AuthenticationError("Invalid email or password")
        token = str(uuid.uuid4())
        now = self.clock()
        self.store.upsert(SESSIONS, token, {
            "token": token,
            "email": email,
            "created_at": _iso(now),
            "expires_at": _iso(now + self.ttl),
        })
        return token

    def validate(self, token: Optional[str]) -> SessionStatus:
        if not token:
            return SessionStatus(False, message="No token provided")
        session = self.store.find(SESSIONS, token)
        if not session:
            return SessionStatus(False, message="Session not found")
        expires_at = session.get("expires_at")
        if expires_at and self.clock() > _parse(expires_at):
            self.store.delete(SESSIONS, token)
            return SessionStatus(False, message="Session expired")
        return SessionStatus(True, email=session.get("email"))

    def require(self, token: Optional[str]) -> str:
        """Return the session's email or raise ``AuthenticationError``."""
        status = self.validate(token)
        if not status.is_valid:
            raise AuthenticationError(status.message or "Unauthorized")
        return status.email or ""

    def logout(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self.store.delete(SESSIONS, token)
