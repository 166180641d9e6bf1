"""Canonical schemas for conversations.

A ``Case`` is a named thread of ``ConversationTurn`` records between a user
and the AI advisor, with a running credits total and the citations collected
from every assistant turn.
"""
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class CitationKind(str, Enum):
    LINK = "link"
    STATUTE = "statute"


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: CitationKind
    title: str
    target: Optional[str] = None

    @model_validator(mode="after")
    def _target_matches_kind(self) -> "Citation":
        if self.kind is CitationKind.LINK and not self.target:
            raise ValueError("link citations need a target")
        if self.kind is CitationKind.STATUTE and self.target is not None:
            raise ValueError("statute references carry no target")
        return self

    @classmethod
    def link(cls, title: str, target: str) -> "Citation":
        return cls(kind=CitationKind.LINK, title=title, target=target)

    @classmethod
    def statute(cls, title: str) -> "Citation":
        return cls(kind=CitationKind.STATUTE, title=title)


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

    @property
    def model_role(self) -> str:
        # Gemini names the assistant side "model"
        return "user" if self is Speaker.USER else "model"


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str
    resource_cost: Optional[int] = Field(default=None, ge=0)
    credits_saved: Optional[int] = Field(default=None, ge=0)
    citations: List[Citation] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(speaker=Speaker.USER, text=text)

    @classmethod
    def assistant(cls, text: str, resource_cost: int, credits_saved: int,
                  citations: Optional[List[Citation]] = None) -> "ConversationTurn":
        return cls(
            speaker=Speaker.ASSISTANT,
            text=text,
            resource_cost=resource_cost,
            credits_saved=credits_saved,
            citations=list(citations or []),
        )


class Case(BaseModel):
    id: str
    title: str
    turns: List[ConversationTurn] = Field(default_factory=list)
    total_credits_saved: int = 0
    references: List[Citation] = Field(default_factory=list)
    renamed: bool = False
    created_at: str = Field(default_factory=utc_now)

    def history(self) -> List[dict]:
        """Prior turns in the ``{role, text}`` shape the advisor expects."""
        return [{"role": t.speaker.model_role, "text": t.text} for t in self.turns if t.text]

    def last_assistant_text(self) -> Optional[str]:
        for turn in reversed(self.turns):
            if turn.speaker is Speaker.ASSISTANT:
                return turn.text
        return None


__all__ = ["CitationKind", "Citation", "Speaker", "ConversationTurn", "Case", "utc_now"]
