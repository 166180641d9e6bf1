"""Multi-step case intake session.

Stages run Basics -> Facts -> Evidence -> Analysis. Each forward move is
guarded by the matching section schema; the only external call is the single
advisor request made when entering Analysis. Every failure leaves the
entered values in place.
"""
from __future__ import annotations
import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from advocat.conversation.models import Citation
from advocat.errors import (
    IntakeValidationError,
    StageTransitionError,
    SubmissionInProgress,
    UpstreamError,
    UpstreamOverloaded,
)
from advocat.intake import forms
from advocat.llm import prompts
from advocat.parsing import scan_citations
from advocat.rewards import Mode, estimate_credits_saved, pity_credits

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    BASICS = "basics"
    FACTS = "facts"
    EVIDENCE = "evidence"
    ANALYSIS = "analysis"


STAGE_ORDER = [Stage.BASICS, Stage.FACTS, Stage.EVIDENCE, Stage.ANALYSIS]

SUMMARY_LABELS: List[Tuple[str, str]] = [
    ("case_title", "Case Title"),
    ("plaintiff_name", "Plaintiff"),
    ("defendant_name", "Defendant"),
    ("case_type", "Case Type"),
    ("state", "State"),
    ("suit_value", "Suit Value (INR)"),
    ("cause_date", "Date of Cause"),
    ("description", "Description"),
    ("relief_sought", "Relief Sought"),
    ("prior_actions", "Prior Actions"),
    ("urgency", "Urgency"),
    ("certificate_status", "65B Certificate"),
]


@dataclass
class AnalysisResult:
    text: str
    tokens_used: int
    credits_saved: int
    citations: List[Citation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "tokensUsed": self.tokens_used,
            "creditsSaved": self.credits_saved,
            "citations": [c.model_dump(mode="json") for c in self.citations],
        }


def analyze_submission(advisor, submission: forms.CaseSubmission) -> AnalysisResult:
    """Send a complete intake record to the advisor and post-process the answer."""
    payload = submission.model_dump(by_alias=True, mode="json", exclude_none=True)
    profile = prompts.GENERATION_PROFILES["case_advisor"]
    try:
        completion = advisor.generate(
            prompts.build_case_prompt(payload),
            system_instruction=prompts.CASE_ADVISOR_INSTRUCTION,
            **profile,
        )
    except UpstreamOverloaded:
        raise
    except UpstreamError as e:
        e.pity_credits = pity_credits(Mode.DEEP)
        raise
    return AnalysisResult(
        text=completion.text,
        tokens_used=completion.tokens_used,
        credits_saved=estimate_credits_saved(completion.tokens_used, len(submission.description), Mode.DEEP),
        citations=scan_citations(completion.text),
    )


def _alias_map(names) -> Dict[str, str]:
    out = {n: n for n in names}
    out.update({forms.to_camel(n): n for n in names})
    return out


_SCALAR_KEYS = _alias_map(forms.SCALAR_FIELDS)
_WITNESS_KEYS = {**_alias_map(forms.WITNESS_FIELDS), "connection": "relation"}
_EVIDENCE_KEYS = {**_alias_map(forms.EVIDENCE_FIELDS), "fileName": "attached_file_name", "attachedFile": "attached_file_name"}


def _normalise(values: Dict[str, Any], keys: Dict[str, str]) -> Dict[str, Any]:
    unknown = [k for k in values if k not in keys]
    if unknown:
        raise IntakeValidationError({k: "Unknown field" for k in unknown}, "Unknown form fields")
    return {keys[k]: ("" if v is None else v) for k, v in values.items()}


class CaseSession:
    def __init__(self, advisor, session_id: Optional[str] = None, owner: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.owner = owner
        self.advisor = advisor
        self._submit_lock = threading.Lock()
        self._clear()

    def _clear(self) -> None:
        self.stage = Stage.BASICS
        self.fields: Dict[str, Any] = {name: "" for name in forms.SCALAR_FIELDS}
        self.witnesses: List[Dict[str, Any]] = []
        self.evidence: List[Dict[str, Any]] = []
        self.loading = False
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        # Case that holds this intake's analysis (or its failed attempts)
        self.case_id: Optional[str] = None

    def _ensure_idle(self) -> None:
        if self.loading:
            raise SubmissionInProgress("Analysis is still running. Please wait.")

    def _ensure_stage(self, stage: Stage) -> None:
        if self.stage is not stage:
            raise StageTransitionError(f"Only allowed in the {stage.value} step (current: {self.stage.value})")

    # ------------------------------------------------------------------
    # Scalar fields
    # ------------------------------------------------------------------

    def update_fields(self, **values: Any) -> None:
        self._ensure_idle()
        if self.stage is Stage.ANALYSIS:
            raise StageTransitionError("The analysis is done; go back or start a new analysis to edit the form.")
        self.fields.update(_normalise(values, _SCALAR_KEYS))

    def _validate(self, model, names) -> Any:
        try:
            return model.model_validate({n: self.fields.get(n) for n in names})
        except ValidationError as ve:
            raise IntakeValidationError(forms.field_errors(ve)) from ve

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def advance(self) -> Stage:
        self._ensure_idle()
        if self.stage is Stage.BASICS:
            self._validate(forms.BasicsSection, forms.BASICS_FIELDS)
            self.stage = Stage.FACTS
        elif self.stage is Stage.FACTS:
            self._validate(forms.FactsSection, forms.FACTS_FIELDS)
            self.stage = Stage.EVIDENCE
        elif self.stage is Stage.EVIDENCE:
            self.submit()
        else:
            raise StageTransitionError("Analysis is complete. Start a new analysis to continue.")
        return self.stage

    def back(self) -> Stage:
        self._ensure_idle()
        idx = STAGE_ORDER.index(self.stage)
        if idx == 0:
            raise StageTransitionError("Already at the first step")
        self.stage = STAGE_ORDER[idx - 1]
        return self.stage

    def reset(self) -> None:
        """Start a new analysis; already persisted cases are not affected."""
        self._ensure_idle()
        self._clear()

    # ------------------------------------------------------------------
    # Witness / evidence lists
    # ------------------------------------------------------------------

    def _add(self, items: List[Dict[str, Any]], defaults: Dict[str, Any], keys, values) -> int:
        self._ensure_stage(Stage.EVIDENCE)
        item = dict(defaults)
        item.update(_normalise(values, keys))
        items.append(item)
        return len(items) - 1

    def _check_index(self, items: List[Dict[str, Any]], index: int, kind: str) -> None:
        if not 0 <= index < len(items):
            raise IntakeValidationError({f"{kind}.{index}": "No such item"}, f"No {kind} item at index {index}")

    def add_witness(self, **values: Any) -> int:
        return self._add(self.witnesses, {"name": "", "relation": "", "knowledge": ""}, _WITNESS_KEYS, values)

    def update_witness(self, index: int, **values: Any) -> None:
        self._ensure_stage(Stage.EVIDENCE)
        self._check_index(self.witnesses, index, "witnesses")
        self.witnesses[index].update(_normalise(values, _WITNESS_KEYS))

    def remove_witness(self, index: int) -> None:
        self._ensure_stage(Stage.EVIDENCE)
        self._check_index(self.witnesses, index, "witnesses")
        del self.witnesses[index]

    def add_evidence(self, **values: Any) -> int:
        return self._add(self.evidence, {"type": forms.EvidenceType.DOCUMENT.value, "description": ""}, _EVIDENCE_KEYS, values)

    def update_evidence(self, index: int, **values: Any) -> None:
        self._ensure_stage(Stage.EVIDENCE)
        self._check_index(self.evidence, index, "evidence")
        self.evidence[index].update(_normalise(values, _EVIDENCE_KEYS))

    def remove_evidence(self, index: int) -> None:
        self._ensure_stage(Stage.EVIDENCE)
        self._check_index(self.evidence, index, "evidence")
        del self.evidence[index]

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submission(self) -> forms.CaseSubmission:
        data: Dict[str, Any] = dict(self.fields)
        data["witnesses"] = [dict(w) for w in self.witnesses]
        data["evidence"] = [dict(e) for e in self.evidence]
        try:
            return forms.CaseSubmission.model_validate(data)
        except ValidationError as ve:
            raise IntakeValidationError(forms.field_errors(ve)) from ve

    def submit(self) -> AnalysisResult:
        if not self._submit_lock.acquire(blocking=False):
            raise SubmissionInProgress("Analysis is still running. Please wait.")
        try:
            self._ensure_stage(Stage.EVIDENCE)
            submission = self.submission()
            self.stage = Stage.ANALYSIS
            self.loading = True
            self.result = None
            self.error = None
            try:
                self.result = analyze_submission(self.advisor, submission)
            except UpstreamError as e:
                self.stage = Stage.EVIDENCE
                self.error = e.message
                logger.warning(f"[intake] Session {self.id} analysis failed: {e.code}")
                raise
            finally:
                self.loading = False
            return self.result
        finally:
            self._submit_lock.release()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def summary(self) -> List[Tuple[str, str]]:
        rows: List[Tuple[str, str]] = []
        for name, label in SUMMARY_LABELS:
            value = str(self.fields.get(name) or "").strip()
            if not value:
                continue
            if name == "state" and self.fields.get("city"):
                value = f"{value} ({str(self.fields['city']).strip()})"
            rows.append((label, value))
        return rows

    def summary_text(self) -> str:
        lines = [f"{label}: {value}" for label, value in self.summary()]
        for i, w in enumerate(self.witnesses, 1):
            lines.append(f"Witness {i}: {w.get('name')} ({w.get('relation')}) - {w.get('knowledge')}")
        for i, e in enumerate(self.evidence, 1):
            attached = f" [{e['attached_file_name']}]" if e.get("attached_file_name") else ""
            lines.append(f"Evidence {i} ({e.get('type')}): {e.get('description')}{attached}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "stage": self.stage.value,
            "loading": self.loading,
            "fields": dict(self.fields),
            "witnesses": [dict(w) for w in self.witnesses],
            "evidence": [dict(e) for e in self.evidence],
            "error": self.error,
            "result": self.result.to_dict() if self.result else None,
            "caseId": self.case_id,
        }
