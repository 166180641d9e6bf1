from typing import Optional, Dict, List, Any, Literal
from pydantic import BaseModel, Field

from advocat.api import config
from advocat.rewards import Mode


class HistoryMessage(BaseModel):
    role: Literal["user", "model", "assistant"]
    text: str = Field(default="", max_length=20000)


class ChatRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=config.MAX_PROMPT_LENGTH)
    mode: Mode = Mode.QUICK
    history: List[HistoryMessage] = Field(default_factory=list, max_length=config.MAX_HISTORY_TURNS)

    def history_dicts(self) -> List[Dict[str, str]]:
        return [{"role": "user" if m.role == "user" else "model", "text": m.text} for m in self.history]


class TurnRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=config.MAX_PROMPT_LENGTH)
    mode: Mode = Mode.QUICK


class CreateCaseRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)


class RenameCaseRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)


class CredentialsRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=200)


class TokenRequest(BaseModel):
    token: Optional[str] = Field(default=None, max_length=100)


class SaveCasesRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=254)
    cases: Dict[str, Any]


def validation_details(ve) -> List[Dict[str, Any]]:
    return ve.errors(include_url=False, include_context=False, include_input=False)
