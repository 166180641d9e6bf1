"""Per-user case map persistence on top of a ``DocumentStore``."""
from __future__ import annotations
import logging
import threading
from typing import Any, Dict

from advocat.conversation.models import utc_now
from advocat.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

USER_CASES = "user_cases"


class CaseRepository:
    """Load and save a user's whole case map (``{case_id: case_dict}``).

    Writes for one user are serialised, and a snapshot tagged with a version
    older than the last one written is dropped, so a slow early save can
    never overwrite a later state.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._written_versions: Dict[str, int] = {}

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(user_id, threading.Lock())

    def load(self, user_id: str) -> Dict[str, Any]:
        record = self.store.find(USER_CASES, user_id)
        return dict(record.get("cases") or {}) if record else {}

    def save(self, user_id: str, cases: Dict[str, Any], version: int = 0) -> bool:
        """Upsert the case map; returns False when the snapshot was stale."""
        with self._lock_for(user_id):
            last = self._written_versions.get(user_id)
            if last is not None and version < last:
                logger.info(f"[cases] Dropping stale snapshot v{version} for {user_id} (have v{last})")
                return False
            self.store.upsert(USER_CASES, user_id, {
                "email": user_id,
                "cases": cases,
                "updated_at": utc_now(),
            })
            self._written_versions[user_id] = version
            return True
