from types import SimpleNamespace

import pytest

from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.llm.gemini import (
    GeminiAdvisor,
    build_contents,
    translate_error,
    usage_token_count,
)


class FakeAPIError(Exception):
    def __init__(self, code, message=""):
        super().__init__(message or f"{code} error")
        self.code = code


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _advisor(response=None, error=None):
    models = FakeModels(response, error)
    return GeminiAdvisor(api_key="test", client=SimpleNamespace(models=models)), models


def test_usage_prefers_total():
    usage = SimpleNamespace(total_token_count=250, prompt_token_count=100, candidates_token_count=90)
    assert usage_token_count(usage) == 250


def test_usage_falls_back_to_parts():
    usage = SimpleNamespace(total_token_count=0, prompt_token_count=100, candidates_token_count=90)
    assert usage_token_count(usage) == 190
    assert usage_token_count(SimpleNamespace(total_token_count=None, prompt_token_count=None,
                                             candidates_token_count=None)) == 0
    assert usage_token_count(None) == 0


def test_generate_sends_config_and_history():
    response = SimpleNamespace(text="Article 21 applies.",
                               usage_metadata=SimpleNamespace(total_token_count=321))
    advisor, models = _advisor(response)
    completion = advisor.generate(
        "Quick mode: deposit",
        system_instruction="Be helpful",
        history=[{"role": "user", "text": "Hi"}, {"role": "model", "text": "Hello"}],
        temperature=0.9,
        max_output_tokens=2048,
    )
    assert completion.text == "Article 21 applies."
    assert completion.tokens_used == 321
    request = models.requests[0]
    assert request["model"] == "gemini-2.5-flash"
    config = request["config"]
    assert config.temperature == 0.9
    assert config.top_k == 1
    assert config.max_output_tokens == 2048
    assert len(config.safety_settings) == 4
    assert [c.role for c in request["contents"]] == ["user", "model", "user"]


def test_build_contents_skips_empty_history():
    contents = build_contents("Now", [{"role": "assistant", "text": ""}, {"role": "assistant", "text": "Earlier"}])
    assert [c.role for c in contents] == ["model", "user"]
    assert contents[-1].parts[0].text == "Now"


def test_503_is_overloaded():
    advisor, _ = _advisor(error=FakeAPIError(503, "The model is overloaded."))
    with pytest.raises(UpstreamOverloaded) as exc:
        advisor.generate("x", system_instruction="s")
    assert exc.value.status == 503
    assert "10 seconds" in exc.value.message


def test_other_status_is_generic():
    advisor, _ = _advisor(error=FakeAPIError(400, "bad request"))
    with pytest.raises(UpstreamError) as exc:
        advisor.generate("x", system_instruction="s")
    assert not isinstance(exc.value, UpstreamOverloaded)
    assert exc.value.upstream_status == 400
    assert exc.value.status == 500


def test_message_markers_without_status():
    assert isinstance(translate_error(RuntimeError("Service Unavailable")), UpstreamOverloaded)
    assert not isinstance(translate_error(RuntimeError("boom")), UpstreamOverloaded)


def test_empty_text_is_an_error():
    advisor, _ = _advisor(SimpleNamespace(text="", usage_metadata=None))
    with pytest.raises(UpstreamError):
        advisor.generate("x", system_instruction="s")


def test_missing_key_fails_before_network():
    with pytest.raises(UpstreamError):
        GeminiAdvisor(api_key="").generate("x", system_instruction="s")
