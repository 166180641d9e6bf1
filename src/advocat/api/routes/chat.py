import logging
from flask import Blueprint, jsonify
from flasgger import swag_from
from pydantic import ValidationError

from advocat.api import dependencies, models, state
from advocat.api.extensions import limiter
from advocat.errors import IntakeValidationError, UpstreamError, UpstreamOverloaded
from advocat.intake import forms
from advocat.intake.session import analyze_submission
from advocat.parsing import count_statutes, scan_citations
from advocat.rewards import estimate_credits_saved, pity_credits

logger = logging.getLogger("api")
chat_bp = Blueprint('chat', __name__)


@chat_bp.route("/api/auth/chat", methods=["POST"])
@limiter.limit("30/minute")
@swag_from({
    'tags': ['chat'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'prompt': {'type': 'string', 'example': 'My landlord will not return my deposit'},
                'mode': {'type': 'string', 'enum': ['quick', 'deep']},
                'history': {'type': 'array', 'items': {'type': 'object'}},
            }
        }
    }],
    'responses': {200: {'description': 'OK'}, 503: {'description': 'Advisor overloaded'}}
})
def chat():
    raw = dependencies.json_body()
    try:
        parsed = models.ChatRequest(**raw)
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400

    ctx = dependencies.get_context()
    try:
        completion = ctx.chat.complete(parsed.prompt, parsed.mode, parsed.history_dicts())
    except UpstreamOverloaded:
        state.record_advisor_call("chat", "overloaded")
        raise
    except UpstreamError as e:
        e.pity_credits = pity_credits(parsed.mode)
        state.record_advisor_call("chat", "failed", parsed.mode.value, e.pity_credits)
        logger.error(f"[chat] Advisor call failed: {e.message}")
        raise

    saved = estimate_credits_saved(completion.tokens_used, len(parsed.prompt), parsed.mode)
    citations = scan_citations(completion.text)
    state.record_advisor_call("chat", "ok", parsed.mode.value, saved)
    return jsonify({
        "text": completion.text,
        "tokensUsed": completion.tokens_used,
        "savedTokens": saved,
        "citations": [c.model_dump(mode="json") for c in citations],
    })


@chat_bp.route("/api/case-advisor", methods=["POST"])
@limiter.limit("10/minute")
@swag_from({
    'tags': ['chat'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'formData': {'type': 'object'},
            }
        }
    }],
    'responses': {200: {'description': 'OK'}, 400: {'description': 'Invalid form'}}
})
def case_advisor():
    raw = dependencies.json_body()
    form_data = raw.get("formData", raw)
    if not isinstance(form_data, dict):
        return jsonify({"error": "invalid_body", "message": "formData must be a JSON object"}), 400
    try:
        submission = forms.CaseSubmission.model_validate(form_data)
    except ValidationError as ve:
        raise IntakeValidationError(forms.field_errors(ve)) from ve

    ctx = dependencies.get_context()
    try:
        result = analyze_submission(ctx.advisor, submission)
    except UpstreamOverloaded:
        state.record_advisor_call("case_advisor", "overloaded")
        raise
    except UpstreamError as e:
        state.record_advisor_call("case_advisor", "failed", "deep", e.pity_credits)
        logger.error(f"[case-advisor] Advisor call failed: {e.message}")
        raise

    state.record_advisor_call("case_advisor", "ok", "deep", result.credits_saved)
    body = result.to_dict()
    body["message"] = f"Analysis complete! Found {count_statutes(result.citations)} relevant legal acts."
    return jsonify(body)
