import logging
from flask import Blueprint, Response, jsonify
from flasgger import swag_from

from advocat.api import constants, dependencies, state
from advocat.api.extensions import limiter
from advocat.conversation.service import APOLOGY_TEXT, record_analysis
from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.export.report import export_filename, render_rights_report
from advocat.intake.session import Stage
from advocat.parsing import count_statutes

logger = logging.getLogger("api")
intake_bp = Blueprint('intake', __name__)


def _session(session_id: str):
    user = dependencies.require_user()
    return user, dependencies.get_context().intake(session_id, user)


def _submit(user, session):
    """Run the analysis and persist it as a case in the user's conversation store."""
    ctx = dependencies.get_context()
    store = ctx.store_for(user)
    title = str(session.fields.get("case_title") or "").strip() or None
    try:
        result = session.submit()
    except UpstreamOverloaded:
        state.record_advisor_call("intake", "overloaded")
        raise
    except UpstreamError as e:
        state.record_advisor_call("intake", "failed", "deep", e.pity_credits)
        logger.error(f"[intake] Analysis failed for session {session.id}: {e.message}")
        case = record_analysis(store, title, session.summary_text(), APOLOGY_TEXT,
                               tokens_used=0, credits_saved=e.pity_credits, case_id=session.case_id)
        session.case_id = case.id
        raise

    state.record_advisor_call("intake", "ok", "deep", result.credits_saved)
    case = record_analysis(store, title, session.summary_text(), result.text,
                           tokens_used=result.tokens_used, credits_saved=result.credits_saved,
                           citations=result.citations, case_id=session.case_id)
    session.case_id = case.id
    body = session.to_dict()
    body["message"] = f"Analysis complete! Found {count_statutes(result.citations)} relevant legal acts."
    return jsonify(body)


@intake_bp.route("/api/intake/options", methods=["GET"])
def options():
    return jsonify({
        "caseCategories": constants.CASE_CATEGORIES,
        "evidenceTypes": constants.EVIDENCE_TYPES,
        "states": constants.INDIAN_STATES,
        "steps": constants.INTAKE_STEPS,
    })


@intake_bp.route("/api/intake", methods=["POST"])
def start():
    user = dependencies.require_user()
    session = dependencies.get_context().open_intake(user)
    return jsonify(session.to_dict()), 201


@intake_bp.route("/api/intake/<session_id>", methods=["GET"])
def snapshot(session_id: str):
    _, session = _session(session_id)
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>", methods=["PATCH"])
def update_fields(session_id: str):
    _, session = _session(session_id)
    session.update_fields(**dependencies.json_body())
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/next", methods=["POST"])
@limiter.limit("20/minute")
def next_step(session_id: str):
    user, session = _session(session_id)
    if session.stage is Stage.EVIDENCE:
        return _submit(user, session)
    session.advance()
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/back", methods=["POST"])
def previous_step(session_id: str):
    _, session = _session(session_id)
    session.back()
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/witnesses", methods=["POST"])
def add_witness(session_id: str):
    _, session = _session(session_id)
    index = session.add_witness(**dependencies.json_body())
    return jsonify({"index": index, **session.to_dict()}), 201


@intake_bp.route("/api/intake/<session_id>/witnesses/<int:index>", methods=["PATCH"])
def update_witness(session_id: str, index: int):
    _, session = _session(session_id)
    session.update_witness(index, **dependencies.json_body())
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/witnesses/<int:index>", methods=["DELETE"])
def remove_witness(session_id: str, index: int):
    _, session = _session(session_id)
    session.remove_witness(index)
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/evidence", methods=["POST"])
def add_evidence(session_id: str):
    _, session = _session(session_id)
    index = session.add_evidence(**dependencies.json_body())
    return jsonify({"index": index, **session.to_dict()}), 201


@intake_bp.route("/api/intake/<session_id>/evidence/<int:index>", methods=["PATCH"])
def update_evidence(session_id: str, index: int):
    _, session = _session(session_id)
    session.update_evidence(index, **dependencies.json_body())
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/evidence/<int:index>", methods=["DELETE"])
def remove_evidence(session_id: str, index: int):
    _, session = _session(session_id)
    session.remove_evidence(index)
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/submit", methods=["POST"])
@limiter.limit("10/minute")
@swag_from({
    'tags': ['intake'],
    'parameters': [{'name': 'session_id', 'in': 'path', 'type': 'string', 'required': True}],
    'responses': {
        200: {'description': 'Analysis stored as a new case'},
        400: {'description': 'Form incomplete'},
        409: {'description': 'Wrong step or submission already running'},
        503: {'description': 'Advisor overloaded; resubmit'},
    }
})
def submit(session_id: str):
    user, session = _session(session_id)
    return _submit(user, session)


@intake_bp.route("/api/intake/<session_id>/reset", methods=["POST"])
def reset(session_id: str):
    _, session = _session(session_id)
    session.reset()
    return jsonify(session.to_dict())


@intake_bp.route("/api/intake/<session_id>/report.pdf", methods=["GET"])
def report(session_id: str):
    _, session = _session(session_id)
    if session.result is None:
        return jsonify({"error": "not_ready", "message": "Run the analysis before exporting a report"}), 409
    title = str(session.fields.get("case_title") or "")
    pdf_data = render_rights_report(
        session.summary(), session.witnesses, session.evidence, session.result.text, case_title=title,
    )
    filename = export_filename(title, "pdf", fallback="advocat_rights_report")
    return Response(
        pdf_data,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
