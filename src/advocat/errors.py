"""Error taxonomy shared by the core and the API layer.

Every error carries an HTTP-like ``status`` and a short machine ``code`` so the
API can render it as ``{"error": code, "message": message}`` without knowing
where it was raised.
"""
from __future__ import annotations
from typing import Dict, Optional


class AdvocatError(Exception):
    status = 500
    code = "internal_error"

    def __init__(self, message: str = "", *, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, object]:
        return {"error": self.code, "message": self.message}


class IntakeValidationError(AdvocatError):
    """Field-scoped validation failure; never reaches the network."""
    status = 400
    code = "validation_failed"

    def __init__(self, field_errors: Dict[str, str], message: str = "Please fill in all required fields for this step."):
        super().__init__(message)
        self.field_errors = dict(field_errors)

    def to_dict(self) -> Dict[str, object]:
        out = super().to_dict()
        out["fields"] = self.field_errors
        return out


class StageTransitionError(AdvocatError):
    status = 409
    code = "invalid_transition"


class SubmissionInProgress(AdvocatError):
    status = 409
    code = "submission_in_progress"


class TurnInProgress(AdvocatError):
    status = 409
    code = "turn_in_progress"


class NotFoundError(AdvocatError):
    status = 404
    code = "not_found"


class AuthenticationError(AdvocatError):
    status = 401
    code = "unauthorized"


class PersistenceError(AdvocatError):
    status = 500
    code = "persistence_failed"


class UpstreamError(AdvocatError):
    """The AI collaborator failed without a usable response."""
    status = 500
    code = "upstream_failed"
    default_message = "An unknown error occurred with the AI. Please try again."

    def __init__(self, message: str = "", *, upstream_status: Optional[int] = None, pity_credits: int = 0):
        super().__init__(message or self.default_message)
        self.upstream_status = upstream_status
        self.pity_credits = pity_credits

    def to_dict(self) -> Dict[str, object]:
        out = super().to_dict()
        if self.pity_credits:
            out["creditsSaved"] = self.pity_credits
        return out


class UpstreamOverloaded(UpstreamError):
    """Retryable upstream condition: the user should wait and resubmit."""
    status = 503
    code = "upstream_overloaded"
    default_message = "The AI model is currently overloaded. Please wait 10 seconds and try submitting again."


__all__ = [
    "AdvocatError",
    "IntakeValidationError",
    "StageTransitionError",
    "SubmissionInProgress",
    "TurnInProgress",
    "NotFoundError",
    "AuthenticationError",
    "PersistenceError",
    "UpstreamError",
    "UpstreamOverloaded",
]
