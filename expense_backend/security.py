# expense_backend/security.py
from functools import wraps

from flask import current_app, g, jsonify
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request

NO_TOKEN_MESSAGE = "No token, authorization denied"
BAD_TOKEN_MESSAGE = "Token is not valid"


def issue_token(user) -> str:
    # identity MUST be a string (PyJWT wants 'sub' as str)
    return create_access_token(identity=str(user.id))


def auth_required(fn):
    """Usage: @auth_required

    Verifies the bearer token and exposes the caller's id as ``g.user_id``.
    Stateless: the user row is not looked up, so a token stays valid until
    it expires even if the account is gone.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        try:
            g.user_id = int(get_jwt_identity())
        except (TypeError, ValueError):
            return jsonify({"message": BAD_TOKEN_MESSAGE}), 401
        return fn(*args, **kwargs)
    return wrapper


def register_jwt_handlers(jwt):
    """Map every token failure to a 401 with a JSON ``message``."""

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"message": NO_TOKEN_MESSAGE}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        current_app.logger.info("Rejected token: %s", reason)
        return jsonify({"message": BAD_TOKEN_MESSAGE}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"message": BAD_TOKEN_MESSAGE}), 401
