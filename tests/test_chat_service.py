import pytest

from advocat.conversation.service import APOLOGY_TEXT, ChatService
from advocat.conversation.models import Speaker
from advocat.conversation.store import ConversationStore
from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.llm.gemini import Completion
from advocat.rewards import Mode


@pytest.fixture
def store(repository):
    return ConversationStore("asha@example.com", repository)


def test_successful_turn(advisor, store):
    advisor.queue(Completion("See [NALSA](https://nalsa.gov.in) under Article 39A.", 400))
    case = store.create_case()
    exchange = ChatService(advisor).ask(store, case.id, "Can I get free legal aid?", Mode.QUICK)
    assert not exchange.failed
    assert exchange.tokens_used == 400
    # 25-char prompt is vague: 400 * 1.5 - 400
    assert exchange.credits_saved == 200
    assert [c.title for c in exchange.citations] == ["NALSA", "Article 39A"]
    turns = exchange.case.turns
    assert [t.speaker for t in turns] == [Speaker.USER, Speaker.ASSISTANT]
    assert turns[1].resource_cost == 400
    assert exchange.case.total_credits_saved == 200
    assert advisor.calls[0]["prompt"].startswith("Quick mode: Can I get free legal aid?")
    assert advisor.calls[0]["history"] == []


def test_history_is_sent_on_follow_up(advisor, store):
    case = store.create_case()
    service = ChatService(advisor)
    service.ask(store, case.id, "First", Mode.DEEP)
    service.ask(store, case.id, "Second", Mode.DEEP)
    history = advisor.calls[1]["history"]
    assert history == [{"role": "user", "text": "First"}, {"role": "model", "text": "Default answer."}]
    assert advisor.calls[1]["prompt"].startswith("Deep mode: Second")


def test_overloaded_appends_nothing(advisor, store):
    advisor.queue(UpstreamOverloaded())
    case = store.create_case()
    with pytest.raises(UpstreamOverloaded):
        ChatService(advisor).ask(store, case.id, "Question", Mode.QUICK)
    assert store.get_case(case.id).turns == []
    assert store.get_case(case.id).total_credits_saved == 0


def test_generic_failure_records_apology_with_pity(advisor, store):
    advisor.queue(UpstreamError(upstream_status=400))
    case = store.create_case()
    exchange = ChatService(advisor).ask(store, case.id, "Question", Mode.DEEP)
    assert exchange.failed
    assert exchange.credits_saved == 20
    turns = exchange.case.turns
    assert turns[1].text == APOLOGY_TEXT
    assert turns[1].resource_cost == 0
    assert exchange.case.total_credits_saved == 20
