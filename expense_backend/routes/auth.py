# expense_backend/routes/auth.py
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import User
from ..security import issue_token
from ..validators import EMAIL_MESSAGE, PASSWORD_MESSAGE, validate_email, validate_password

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@auth_bp.post("/register")
def register():
    data = _json_body()
    name = data.get("name")
    username = data.get("username")
    email = data.get("email")
    password = data.get("password")

    if not validate_password(password):
        return jsonify({"message": PASSWORD_MESSAGE}), 400
    if not validate_email(email):
        return jsonify({"message": EMAIL_MESSAGE}), 400

    for field, value in (("name", name), ("username", username)):
        if not isinstance(value, str) or not value.strip():
            return jsonify({"message": "Registration failed", "error": f"{field} is required"}), 400

    user = User(name=name.strip(), username=username.strip(), email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info("Registration rejected, duplicate username or email: %s", username)
        return jsonify({"message": "Username or email already exists."}), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error("Registration failed for %s: %s", username, e)
        return jsonify({"message": "Registration failed", "error": str(e)}), 400

    current_app.logger.info("Registered user id=%s username=%s", user.id, user.username)
    return jsonify({"message": "User registered successfully"}), 201


@auth_bp.post("/login")
def login():
    data = _json_body()
    identifier = data.get("emailOrUsername")
    password = data.get("password")

    try:
        user = User.find_by_identifier(identifier) if isinstance(identifier, str) else None
        # Unknown identifier and wrong password look the same to the caller
        if not user or not user.check_password(password):
            current_app.logger.warning("Failed login for %r", identifier)
            return jsonify({"message": "Invalid credentials"}), 401
        token = issue_token(user)
    except (SQLAlchemyError, TypeError, ValueError) as e:
        db.session.rollback()
        current_app.logger.error("Login failed for %r: %s", identifier, e)
        return jsonify({"message": "Login failed", "error": str(e)}), 400

    current_app.logger.info("User id=%s logged in", user.id)
    return jsonify({"token": token}), 200
