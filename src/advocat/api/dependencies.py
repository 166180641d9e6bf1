import os
import logging
from datetime import timedelta
from typing import Optional
from flask import request

from advocat.api import config, state
from advocat.errors import AdvocatError
from advocat.llm.gemini import GeminiAdvisor
from advocat.storage.documents import DocumentStore, JsonFileDocumentStore, MemoryDocumentStore

logger = logging.getLogger("api")


def build_document_store() -> DocumentStore:
    if config.STORAGE_BACKEND == "memory":
        logger.info("[api] Using in-memory document store")
        return MemoryDocumentStore()
    os.makedirs(config.DATA_DIR, exist_ok=True)
    logger.info(f"[api] Using JSON document store at {config.DATA_DIR}")
    return JsonFileDocumentStore(config.DATA_DIR)


def init_context() -> state.AppContext:
    if not config.GEMINI_API_KEY:
        logger.warning("[api] GEMINI_API_KEY not set; advisor calls will fail until configured")
    state.context = state.AppContext(
        documents=build_document_store(),
        advisor=GeminiAdvisor(api_key=config.GEMINI_API_KEY, model_name=config.GEMINI_MODEL),
        session_ttl=timedelta(days=config.SESSION_TTL_DAYS),
        title_length=config.CASE_TITLE_LENGTH,
    )
    return state.context


def get_context() -> state.AppContext:
    if state.context is None:
        raise AdvocatError("Service not initialized", status=503, code="not_ready")
    return state.context


def session_token() -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return request.headers.get("X-Session-Token") or None


def require_user() -> str:
    """Email of the authenticated user; raises AuthenticationError otherwise."""
    return get_context().sessions.require(session_token())


def json_body() -> dict:
    raw = request.get_json(silent=True)
    if raw is None:
        raise AdvocatError("Expected application/json body", status=400, code="invalid_body")
    if not isinstance(raw, dict):
        raise AdvocatError("Body must be a JSON object", status=400, code="invalid_body")
    return raw
