"""Per-user conversation store.

Holds the user's case map and the active case id. Aggregates are updated
incrementally on every append; the whole map is persisted after every
mutation.
"""
from __future__ import annotations
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional

from advocat.conversation.models import Case, Citation, ConversationTurn, Speaker
from advocat.errors import AdvocatError, NotFoundError, TurnInProgress
from advocat.parsing import merge_references
from advocat.storage.cases import CaseRepository

logger = logging.getLogger(__name__)

DEFAULT_TITLE_LENGTH = 30


def derive_title(text: str, length: int = DEFAULT_TITLE_LENGTH) -> str:
    text = (text or "").strip()
    if len(text) <= length:
        return text or "Case"
    return text[:length] + "..."


def default_case_title(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"Case - {now.strftime('%d/%m/%Y')}"


def reconcile(case: Case) -> Case:
    """Recompute the credits total from the turns and drop duplicate reference titles."""
    total = sum(t.credits_saved or 0 for t in case.turns)
    references = merge_references(case.references, [])
    if total == case.total_credits_saved and len(references) == len(case.references):
        return case
    return case.model_copy(update={"total_credits_saved": total, "references": references})


class ConversationStore:
    def __init__(self, user_id: str, repository: CaseRepository, title_length: int = DEFAULT_TITLE_LENGTH):
        self.user_id = user_id
        self.repository = repository
        self.title_length = title_length
        self.cases: Dict[str, Case] = {}
        self.active_case_id: Optional[str] = None
        self.dirty = False
        self._version = 0
        self._lock = threading.RLock()
        self._in_flight: set = set()
        # Stored entries that failed validation; written back untouched on every persist
        self.unreadable: Dict[str, dict] = {}

    # ------------------------------------------------------------------
    # Loading / persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, user_id: str, repository: CaseRepository, **kwargs) -> "ConversationStore":
        store = cls(user_id, repository, **kwargs)
        for case_id, raw in repository.load(user_id).items():
            try:
                store.cases[case_id] = reconcile(Case.model_validate(raw))
            except ValueError as e:
                store.unreadable[case_id] = raw
                logger.warning(f"[store] Keeping unreadable case {case_id} for {user_id} as-is: {e}")
        if store.cases:
            store.active_case_id = next(iter(store.cases))
        return store

    def snapshot(self) -> Dict[str, dict]:
        data = {cid: raw for cid, raw in self.unreadable.items() if cid not in self.cases}
        data.update({cid: c.model_dump(mode="json") for cid, c in self.cases.items()})
        return data

    def persist(self) -> bool:
        """Save the whole case map; failures are logged and retried on the next mutation."""
        with self._lock:
            self._version += 1
            version = self._version
            data = self.snapshot()
        try:
            self.repository.save(self.user_id, data, version)
        except AdvocatError as e:
            self.dirty = True
            logger.warning(f"[store] Persist failed for {self.user_id}: {e.message}")
            return False
        except OSError as e:
            self.dirty = True
            logger.warning(f"[store] Persist failed for {self.user_id}: {e}")
            return False
        self.dirty = False
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_case(self, case_id: str) -> Case:
        case = self.cases.get(case_id)
        if case is None:
            raise NotFoundError(f"Case {case_id} not found")
        return case

    def list_cases(self) -> List[Case]:
        return list(self.cases.values())

    def active_case(self) -> Optional[Case]:
        if self.active_case_id is None:
            return None
        return self.cases.get(self.active_case_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_case(self, title: Optional[str] = None) -> Case:
        with self._lock:
            case_id = f"case-{uuid.uuid4().hex[:12]}"
            case = Case(
                id=case_id,
                title=(title or "").strip() or default_case_title(),
                renamed=bool(title and title.strip()),
            )
            self.cases[case_id] = case
            self.active_case_id = case_id
        self.persist()
        return case

    def select_case(self, case_id: str) -> Case:
        with self._lock:
            case = self.get_case(case_id)
            self.active_case_id = case_id
        return case

    def append_turn(self, case_id: str, turn: ConversationTurn,
                    citations: Optional[Iterable[Citation]] = None) -> Case:
        with self._lock:
            case = self.get_case(case_id)
            updates: dict = {"turns": case.turns + [turn]}
            if turn.credits_saved:
                updates["total_credits_saved"] = case.total_credits_saved + turn.credits_saved
            new_refs = list(citations if citations is not None else turn.citations)
            if new_refs:
                updates["references"] = merge_references(case.references, new_refs)
            if (turn.speaker is Speaker.USER and not case.renamed
                    and not any(t.speaker is Speaker.USER for t in case.turns)):
                updates["title"] = derive_title(turn.text, self.title_length)
            case = case.model_copy(update=updates)
            self.cases[case_id] = case
        self.persist()
        return case

    def rename_case(self, case_id: str, title: str) -> Case:
        title = (title or "").strip()
        if not title:
            raise AdvocatError("Case title cannot be empty", status=400, code="validation_failed")
        with self._lock:
            case = self.get_case(case_id).model_copy(update={"title": title, "renamed": True})
            self.cases[case_id] = case
        self.persist()
        return case

    def delete_case(self, case_id: str) -> None:
        with self._lock:
            self.get_case(case_id)
            del self.cases[case_id]
            if self.active_case_id == case_id:
                self.active_case_id = next(iter(self.cases), None)
        self.persist()

    def replace_cases(self, raw_cases: Dict[str, dict]) -> List[Case]:
        """Overwrite the whole case map with a client-supplied one (last writer wins)."""
        parsed: Dict[str, Case] = {}
        for case_id, raw in raw_cases.items():
            if not isinstance(raw, dict):
                raise AdvocatError(f"Case {case_id} must be an object", status=400, code="validation_failed")
            try:
                parsed[case_id] = reconcile(Case.model_validate({**raw, "id": case_id}))
            except ValueError as e:
                raise AdvocatError(f"Case {case_id} is malformed: {e}", status=400, code="validation_failed") from e
        with self._lock:
            self.cases = parsed
            self.unreadable = {}
            if self.active_case_id not in parsed:
                self.active_case_id = next(iter(parsed), None)
        self.persist()
        return self.list_cases()

    @contextmanager
    def begin_turn(self, case_id: str) -> Iterator[Case]:
        """Mark a turn as in flight for ``case_id``; a concurrent second turn is rejected."""
        with self._lock:
            case = self.get_case(case_id)
            if case_id in self._in_flight:
                raise TurnInProgress("A response for this case is still loading. Please wait.")
            self._in_flight.add(case_id)
        try:
            yield case
        finally:
            with self._lock:
                self._in_flight.discard(case_id)
