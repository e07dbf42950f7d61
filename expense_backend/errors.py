# expense_backend/errors.py
from flask import current_app, jsonify, request


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(e):
        return jsonify(message=getattr(e, "description", "Bad Request")), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify(message="Unauthorized"), 401

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(message="Not Found", path=request.path), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(message="Method Not Allowed"), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify(message="Request body too large"), 413

    @app.errorhandler(500)
    def server_error(e):
        original = getattr(e, "original_exception", None) or e
        current_app.logger.error("Unhandled exception: %s", original, exc_info=original)
        return jsonify(message="Internal Server Error", error=str(original)), 500
