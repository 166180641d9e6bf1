from typing import Any, Dict, Optional
from datetime import timedelta
import threading

from advocat.auth.sessions import SessionManager
from advocat.conversation.service import ChatService
from advocat.conversation.store import ConversationStore
from advocat.errors import NotFoundError
from advocat.intake.session import CaseSession
from advocat.storage.cases import CaseRepository
from advocat.storage.documents import DocumentStore

INTAKE_MAX_SESSIONS = 1000  # Prevent unbounded growth


class AppContext:
    """Everything a request needs: stores, advisor, sessions and open intakes."""

    def __init__(self, documents: DocumentStore, advisor: Any,
                 session_ttl: timedelta = timedelta(days=7), title_length: int = 30):
        self.documents = documents
        self.advisor = advisor
        self.title_length = title_length
        self.sessions = SessionManager(documents, ttl=session_ttl)
        self.repository = CaseRepository(documents)
        self.chat = ChatService(advisor)
        self._stores: Dict[str, ConversationStore] = {}
        self._intakes: Dict[str, CaseSession] = {}
        self._lock = threading.Lock()

    def store_for(self, user_id: str) -> ConversationStore:
        with self._lock:
            store = self._stores.get(user_id)
            if store is None:
                store = ConversationStore.load(user_id, self.repository, title_length=self.title_length)
                self._stores[user_id] = store
            return store

    def open_intake(self, owner: str) -> CaseSession:
        session = CaseSession(self.advisor, owner=owner)
        with self._lock:
            if len(self._intakes) >= INTAKE_MAX_SESSIONS:
                oldest = next(iter(self._intakes))
                del self._intakes[oldest]
            self._intakes[session.id] = session
        return session

    def intake(self, session_id: str, owner: str) -> CaseSession:
        with self._lock:
            session = self._intakes.get(session_id)
        if session is None or session.owner != owner:
            raise NotFoundError(f"Intake session {session_id} not found")
        return session

    def close_intake(self, session_id: str) -> None:
        with self._lock:
            self._intakes.pop(session_id, None)


# Application context (set by dependencies.init_context)
context: Optional[AppContext] = None

# Metrics
REQUEST_COUNT: Any = None
REQUEST_LATENCY: Any = None
ADVISOR_CALLS_TOTAL: Any = None
CREDITS_SAVED_TOTAL: Any = None


def record_advisor_call(endpoint: str, outcome: str, mode: Optional[str] = None, credits: int = 0) -> None:
    """Update advisor metrics; metrics are best-effort."""
    try:
        if ADVISOR_CALLS_TOTAL:
            ADVISOR_CALLS_TOTAL.labels(endpoint, outcome).inc()
        if CREDITS_SAVED_TOTAL and credits:
            CREDITS_SAVED_TOTAL.labels(mode or "deep").inc(credits)
    except Exception:
        pass
