import logging
from flask import Blueprint, Response, jsonify, request
from flasgger import swag_from
from pydantic import ValidationError

from advocat.api import dependencies, models, state
from advocat.api.extensions import limiter
from advocat.errors import AdvocatError, UpstreamError, UpstreamOverloaded
from advocat.export.report import export_filename, render_case_text
from advocat.rewards import Mode

logger = logging.getLogger("api")
cases_bp = Blueprint('cases', __name__)


def _case_summary(case, active_id):
    return {
        "id": case.id,
        "title": case.title,
        "turns": len(case.turns),
        "totalCreditsSaved": case.total_credits_saved,
        "references": len(case.references),
        "createdAt": case.created_at,
        "active": case.id == active_id,
    }


def _store():
    return dependencies.get_context().store_for(dependencies.require_user())


@cases_bp.route("/api/cases", methods=["GET"])
def list_cases():
    store = _store()
    return jsonify({
        "cases": [_case_summary(c, store.active_case_id) for c in store.list_cases()],
        "activeCaseId": store.active_case_id,
    })


@cases_bp.route("/api/cases", methods=["POST"])
def create_case():
    store = _store()
    raw = request.get_json(silent=True) or {}
    if not isinstance(raw, dict):
        return jsonify({"error": "invalid_body"}), 400
    try:
        parsed = models.CreateCaseRequest(**raw)
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    case = store.create_case(parsed.title)
    return jsonify(case.model_dump(mode="json")), 201


@cases_bp.route("/api/cases/<case_id>", methods=["GET"])
def get_case(case_id: str):
    store = _store()
    return jsonify(store.get_case(case_id).model_dump(mode="json"))


@cases_bp.route("/api/cases/<case_id>", methods=["PATCH"])
def rename_case(case_id: str):
    store = _store()
    try:
        parsed = models.RenameCaseRequest(**dependencies.json_body())
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    case = store.rename_case(case_id, parsed.title)
    return jsonify(case.model_dump(mode="json"))


@cases_bp.route("/api/cases/<case_id>", methods=["DELETE"])
def delete_case(case_id: str):
    store = _store()
    store.delete_case(case_id)
    return jsonify({"deleted": case_id, "activeCaseId": store.active_case_id})


@cases_bp.route("/api/cases/<case_id>/select", methods=["POST"])
def select_case(case_id: str):
    store = _store()
    case = store.select_case(case_id)
    return jsonify({"activeCaseId": case.id})


@cases_bp.route("/api/cases/<case_id>/turns", methods=["POST"])
@limiter.limit("30/minute")
@swag_from({
    'tags': ['cases'],
    'consumes': ['application/json'],
    'parameters': [
        {'name': 'case_id', 'in': 'path', 'type': 'string', 'required': True},
        {
            'name': 'body', 'in': 'body', 'required': True,
            'schema': {
                'type': 'object',
                'properties': {
                    'prompt': {'type': 'string'},
                    'mode': {'type': 'string', 'enum': ['quick', 'deep']},
                }
            }
        },
    ],
    'responses': {200: {'description': 'OK'}, 409: {'description': 'Turn in progress'}}
})
def add_turn(case_id: str):
    store = _store()
    try:
        parsed = models.TurnRequest(**dependencies.json_body())
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    try:
        exchange = dependencies.get_context().chat.ask(store, case_id, parsed.prompt, parsed.mode)
    except UpstreamOverloaded:
        state.record_advisor_call("turns", "overloaded")
        raise
    except UpstreamError:
        state.record_advisor_call("turns", "failed")
        raise

    if exchange.failed:
        state.record_advisor_call("turns", "failed", parsed.mode.value, exchange.credits_saved)
        logger.error(f"[cases] Advisor call failed for case {case_id}: {exchange.message}")
        body = UpstreamError(exchange.message or "").to_dict()
        body.update({
            "creditsSaved": exchange.credits_saved,
            "case": exchange.case.model_dump(mode="json"),
        })
        return jsonify(body), UpstreamError.status

    state.record_advisor_call("turns", "ok", parsed.mode.value, exchange.credits_saved)
    return jsonify({
        "text": exchange.text,
        "tokensUsed": exchange.tokens_used,
        "creditsSaved": exchange.credits_saved,
        "citations": [c.model_dump(mode="json") for c in exchange.citations],
        "case": exchange.case.model_dump(mode="json"),
    })


@cases_bp.route("/api/cases/<case_id>/export", methods=["GET"])
def export_case(case_id: str):
    store = _store()
    case = store.get_case(case_id)
    try:
        mode = Mode(request.args.get("mode", Mode.QUICK.value))
    except ValueError:
        return jsonify({"error": "validation_failed", "message": "mode must be quick or deep"}), 400
    filename = export_filename(case.title, "txt")
    return Response(
        render_case_text(case, mode.value),
        mimetype="text/plain",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _check_owner(email, user):
    if email and email.strip().lower() != user:
        raise AdvocatError("Cannot access another user's cases", status=403, code="forbidden")


@cases_bp.route("/api/cases/load", methods=["POST"])
def load_cases():
    user = dependencies.require_user()
    raw = request.get_json(silent=True) or {}
    _check_owner(raw.get("email") if isinstance(raw, dict) else None, user)
    store = dependencies.get_context().store_for(user)
    return jsonify({"cases": store.snapshot(), "activeCaseId": store.active_case_id})


@cases_bp.route("/api/cases/save", methods=["POST"])
def save_cases():
    user = dependencies.require_user()
    try:
        parsed = models.SaveCasesRequest(**dependencies.json_body())
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    _check_owner(parsed.email, user)
    store = dependencies.get_context().store_for(user)
    store.replace_cases(parsed.cases)
    if store.dirty:
        return jsonify({"error": "persistence_failed", "message": "Error saving cases"}), 500
    return jsonify({"success": True, "count": len(store.cases)})
