"""Chat pipeline: prompt -> advisor -> citations + credits -> conversation store."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from advocat.conversation.models import Case, Citation, ConversationTurn
from advocat.conversation.store import ConversationStore
from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.llm import prompts
from advocat.parsing import scan_citations
from advocat.rewards import Mode, estimate_credits_saved, pity_credits

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I'm having trouble connecting right now. Please try again."


@dataclass
class Exchange:
    case: Case
    text: str
    tokens_used: int = 0
    credits_saved: int = 0
    citations: List[Citation] = field(default_factory=list)
    failed: bool = False
    message: Optional[str] = None


def record_analysis(store: ConversationStore, title: str, user_text: str, text: str,
                    tokens_used: int, credits_saved: int, citations: Optional[List[Citation]] = None,
                    case_id: Optional[str] = None) -> Case:
    """Persist a one-shot analysis (intake summary + advisor answer).

    Appends to ``case_id`` when it still exists, so retries of one intake stay in one case.
    """
    if case_id is not None and case_id in store.cases:
        case = store.get_case(case_id)
    else:
        case = store.create_case(title=title)
    store.append_turn(case.id, ConversationTurn.user(user_text))
    return store.append_turn(case.id, ConversationTurn.assistant(
        text, resource_cost=tokens_used, credits_saved=credits_saved, citations=citations,
    ))


class ChatService:
    def __init__(self, advisor):
        self.advisor = advisor

    def complete(self, prompt: str, mode: Mode, history=()):
        profile = prompts.GENERATION_PROFILES["chat"]
        return self.advisor.generate(
            prompts.build_chat_prompt(prompt, mode),
            system_instruction=prompts.GENERAL_QUERY_INSTRUCTION,
            history=list(history),
            **profile,
        )

    def ask(self, store: ConversationStore, case_id: str, prompt: str, mode: Mode) -> Exchange:
        mode = Mode(mode)
        with store.begin_turn(case_id) as case:
            history = case.history()
            try:
                completion = self.complete(prompt, mode, history)
            except UpstreamOverloaded:
                logger.warning(f"[chat] Advisor overloaded for case {case_id}; nothing recorded")
                raise
            except UpstreamError as e:
                credits = pity_credits(mode)
                store.append_turn(case_id, ConversationTurn.user(prompt))
                case = store.append_turn(
                    case_id, ConversationTurn.assistant(APOLOGY_TEXT, resource_cost=0, credits_saved=credits)
                )
                return Exchange(case=case, text=APOLOGY_TEXT, credits_saved=credits, failed=True, message=e.message)

            citations = scan_citations(completion.text)
            credits = estimate_credits_saved(completion.tokens_used, len(prompt), mode)
            store.append_turn(case_id, ConversationTurn.user(prompt))
            case = store.append_turn(case_id, ConversationTurn.assistant(
                completion.text,
                resource_cost=completion.tokens_used,
                credits_saved=credits,
                citations=citations,
            ))
            return Exchange(
                case=case,
                text=completion.text,
                tokens_used=completion.tokens_used,
                credits_saved=credits,
                citations=citations,
            )
