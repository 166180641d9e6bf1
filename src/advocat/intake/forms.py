"""Intake form schemas.

Each section model is the validation guard of one stage of the intake
session. Field names are snake_case; the camelCase names used by the web
client (``caseTitle``, ``plaintiffName`` ...) are accepted as aliases and
are what the advisor prompt receives.
"""
from __future__ import annotations
import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class EvidenceType(str, Enum):
    DOCUMENT = "document"
    PHOTO = "photo"
    TESTIMONY = "testimony"
    OTHER = "other"


EVIDENCE_TYPE_ALIASES = {"documents": "document", "photos": "photo"}

DESCRIPTION_MIN_LENGTH = 10

# Shown to the user instead of pydantic's generic wording
FIELD_MESSAGES: Dict[str, str] = {
    "case_title": "Please give your case a name",
    "plaintiff_name": "Your name is required",
    "defendant_name": "Opponent name is required",
    "case_type": "Case type is required",
    "state": "State is required",
    "city": "City is required",
    "description": f"Please describe what happened (at least {DESCRIPTION_MIN_LENGTH} chars)",
    "suit_value": "Suit value must be a number",
    "name": "Witness name is required",
    "relation": "Connection is required",
    "knowledge": "Knowledge is required",
    "type": "Evidence type must be one of document, photo, testimony, other",
}


class _FormModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class BasicsSection(_FormModel):
    case_title: str = Field(min_length=1, max_length=200)
    plaintiff_name: str = Field(min_length=1, max_length=200)
    defendant_name: str = Field(min_length=1, max_length=200)
    case_type: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)


class FactsSection(_FormModel):
    description: str = Field(min_length=DESCRIPTION_MIN_LENGTH, max_length=5000)
    cause_date: Optional[str] = Field(default=None, max_length=50)
    relief_sought: Optional[str] = Field(default=None, max_length=2000)
    suit_value: Optional[str] = Field(default=None, max_length=20)
    prior_actions: Optional[str] = Field(default=None, max_length=2000)
    urgency: Optional[str] = Field(default=None, max_length=100)
    certificate_status: Optional[str] = Field(default=None, max_length=200)

    @field_validator("suit_value", mode="before")
    @classmethod
    def _digits_only(cls, v):
        if v is None:
            return None
        raw = str(v).replace(",", "").replace(" ", "")
        if not raw:
            return None
        if not raw.isdigit():
            raise ValueError("Suit value must be a number")
        return raw


class Witness(_FormModel):
    name: str = Field(min_length=1, max_length=200)
    relation: str = Field(min_length=1, max_length=200, validation_alias=AliasChoices("relation", "connection"))
    knowledge: str = Field(min_length=1, max_length=2000)


class EvidenceItem(_FormModel):
    type: EvidenceType = EvidenceType.DOCUMENT
    description: str = Field(min_length=1, max_length=2000)
    attached_file_name: Optional[str] = Field(
        default=None, max_length=255,
        validation_alias=AliasChoices("attached_file_name", "attachedFileName", "fileName", "attachedFile"),
    )

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return EVIDENCE_TYPE_ALIASES.get(v, v)
        return v


class CaseSubmission(BasicsSection, FactsSection):
    """The complete intake record sent to the advisor."""
    witnesses: List[Witness] = Field(default_factory=list, max_length=20)
    evidence: List[EvidenceItem] = Field(default_factory=list, max_length=20)


BASICS_FIELDS = tuple(BasicsSection.model_fields)
FACTS_FIELDS = tuple(FactsSection.model_fields)
SCALAR_FIELDS = BASICS_FIELDS + FACTS_FIELDS
WITNESS_FIELDS = tuple(Witness.model_fields)
EVIDENCE_FIELDS = tuple(EvidenceItem.model_fields)


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def field_errors(ve: ValidationError, prefix: str = "") -> Dict[str, str]:
    """Map a pydantic error list to ``{field: message}`` (first error per field)."""
    out: Dict[str, str] = {}
    for err in ve.errors():
        loc = [to_snake(p) if isinstance(p, str) else str(p) for p in err.get("loc", ())]
        name = loc[-1] if loc else "__root__"
        key = prefix + ".".join(loc) if loc else prefix + name
        if key not in out:
            out[key] = FIELD_MESSAGES.get(name, err.get("msg", "Invalid value"))
    return out
