# expense_backend/routes/expenses.py
from flask import Blueprint, current_app, g, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Expense
from ..security import auth_required
from ..uploads import with_image_upload
from ..validators import validate_expense

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")

NOT_FOUND = {"message": "Expense not found"}


def _server_error(e):
    db.session.rollback()
    current_app.logger.exception("Expense operation failed: %s", e)
    return jsonify({"message": str(e)}), 500


def _commit():
    """Commit, turning constraint violations into a 400 response.

    Returns None on success, otherwise the error response.
    """
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        return jsonify({"message": str(e.orig)}), 400
    except SQLAlchemyError as e:
        return _server_error(e)
    return None


@expenses_bp.post("")
@auth_required
@with_image_upload
def create_expense():
    result = validate_expense(g.payload)
    if not result.ok:
        return jsonify({"message": result.message}), 400

    expense = Expense(user_id=g.user_id)
    expense.apply(result.data)
    db.session.add(expense)
    failed = _commit()
    if failed:
        return failed
    return jsonify(expense.serialize()), 201


@expenses_bp.get("")
@auth_required
def list_expenses():
    try:
        items = (
            Expense.owned_by(g.user_id)
            .order_by(Expense.date.desc(), Expense.created_at.desc(), Expense.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        return _server_error(e)
    return jsonify([e.serialize() for e in items]), 200


@expenses_bp.get("/<expense_id>")
@auth_required
def get_expense(expense_id):
    try:
        expense = Expense.get_owned(expense_id, g.user_id)
    except SQLAlchemyError as e:
        return _server_error(e)
    if not expense:
        return jsonify(NOT_FOUND), 404
    return jsonify(expense.serialize()), 200


@expenses_bp.put("/<expense_id>")
@auth_required
@with_image_upload
def update_expense(expense_id):
    try:
        expense = Expense.get_owned(expense_id, g.user_id)
    except SQLAlchemyError as e:
        return _server_error(e)
    if not expense:
        return jsonify(NOT_FOUND), 404

    result = validate_expense(g.payload, partial=True)
    if not result.ok:
        return jsonify({"message": result.message}), 400

    expense.apply(result.data)
    failed = _commit()
    if failed:
        return failed
    return jsonify(expense.serialize()), 200


@expenses_bp.delete("/<expense_id>")
@auth_required
def delete_expense(expense_id):
    try:
        expense = Expense.get_owned(expense_id, g.user_id)
        if not expense:
            return jsonify(NOT_FOUND), 404
        db.session.delete(expense)
        db.session.commit()
    except SQLAlchemyError as e:
        return _server_error(e)
    current_app.logger.info("Deleted expense id=%s for user id=%s", expense_id, g.user_id)
    return jsonify({"message": "Expense deleted successfully"}), 200
