import os
import platform
from flask import Blueprint, jsonify, Response

from advocat.api import config, state

monitoring_bp = Blueprint('monitoring', __name__)

@monitoring_bp.route("/metrics", methods=["GET"])
def metrics():
    from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

@monitoring_bp.route("/version", methods=["GET"])
def version():
    return jsonify({
        "version": config.APP_VERSION,
        "env": config.APP_ENV,
        "commit": os.getenv("GIT_COMMIT"),
        "python": platform.python_version(),
        "model": config.GEMINI_MODEL,
        "storage": config.STORAGE_BACKEND,
    })

@monitoring_bp.route("/api/version", methods=["GET"])
def api_version():
    return version()

@monitoring_bp.route("/api/health", methods=["GET"])
def health():
    ctx = state.context
    if ctx is None:
        return jsonify({"status": "error", "detail": "context not initialized"}), 500
    try:
        ctx.documents.find("users", "__healthcheck__")
        return jsonify({"status": "ok"}), 200
    except Exception as e:
        return jsonify({"status": "error", "detail": str(e)}), 500

@monitoring_bp.route("/api/health/ready", methods=["GET"])
def health_ready():
    """Readiness probe - storage reachable and an advisor key configured."""
    ctx = state.context
    checks = {
        'context_ready': ctx is not None,
        'advisor_configured': bool(ctx is not None and getattr(ctx.advisor, 'api_key', None)),
    }
    all_ready = all(checks.values())
    return jsonify({
        "ready": all_ready,
        "checks": checks
    }), 200 if all_ready else 503

@monitoring_bp.route("/api/health/live", methods=["GET"])
def health_live():
    """Liveness probe - minimal check that service is running."""
    return jsonify({"alive": True}), 200
