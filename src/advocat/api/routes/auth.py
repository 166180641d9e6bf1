import logging
from flask import Blueprint, jsonify
from flasgger import swag_from
from pydantic import ValidationError

from advocat.api import dependencies, models
from advocat.api.extensions import limiter

logger = logging.getLogger("api")
auth_bp = Blueprint('auth', __name__)

_CREDENTIALS_SCHEMA = {
    'tags': ['auth'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'email': {'type': 'string', 'example': 'asha@example.com'},
                'password': {'type': 'string'},
            }
        }
    }],
}


def _credentials():
    raw = dependencies.json_body()
    return models.CredentialsRequest(**raw)


@auth_bp.route("/api/auth/signup", methods=["POST"])
@limiter.limit("10/minute")
@swag_from({**_CREDENTIALS_SCHEMA, 'responses': {201: {'description': 'Created'}, 409: {'description': 'Exists'}}})
def signup():
    try:
        creds = _credentials()
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    dependencies.get_context().sessions.register(creds.email, creds.password)
    return jsonify({"message": "User created successfully"}), 201


@auth_bp.route("/api/auth/login", methods=["POST"])
@limiter.limit("20/minute")
@swag_from({**_CREDENTIALS_SCHEMA, 'responses': {200: {'description': 'OK'}, 401: {'description': 'Bad credentials'}}})
def login():
    try:
        creds = _credentials()
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    token = dependencies.get_context().sessions.login(creds.email, creds.password)
    return jsonify({"token": token, "email": creds.email.strip().lower()})


@auth_bp.route("/api/auth/validate", methods=["POST"])
def validate():
    token = dependencies.session_token()
    if token is None:
        try:
            token = models.TokenRequest(**dependencies.json_body()).token
        except ValidationError as ve:
            return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    status = dependencies.get_context().sessions.validate(token)
    return jsonify(status.to_dict())


@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    token = dependencies.session_token()
    if token is None:
        try:
            token = models.TokenRequest(**dependencies.json_body()).token
        except ValidationError as ve:
            return jsonify({"error": "validation_failed", "details": models.validation_details(ve)}), 400
    removed = dependencies.get_context().sessions.logout(token)
    return jsonify({"success": removed})
