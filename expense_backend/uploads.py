# expense_backend/uploads.py
import time
from functools import wraps
from io import BytesIO

from flask import Blueprint, Request, current_app, g, jsonify, request, send_from_directory
from werkzeug.utils import secure_filename

from .storage import ImageStorageError

IMAGE_FIELD = "image"
IMAGE_URL_FIELD = "imageUrl"

bp = Blueprint("uploads", __name__)


class InMemoryUploadRequest(Request):
    """Request whose multipart file parts are parsed into BytesIO.

    Werkzeug's default spools parts over 500 KiB to a temporary file;
    MAX_CONTENT_LENGTH bounds what is kept in memory here instead.
    """

    def _get_file_stream(self, total_content_length, content_type, filename=None, content_length=None):
        return BytesIO()


@bp.get("/uploads/<path:filename>")
def serve_upload(filename):
    storage = current_app.extensions["image_storage"]
    return send_from_directory(storage.folder, filename)


def request_payload():
    """Body fields from a multipart form or a JSON document."""
    if request.mimetype in ("multipart/form-data", "application/x-www-form-urlencoded"):
        return request.form.to_dict()
    data = request.get_json(silent=True)
    return {} if data is None else data


def object_key(filename: str) -> str:
    name = secure_filename(filename or "") or "upload"
    return f"{int(time.time() * 1000)}_{name}"


def with_image_upload(fn):
    """Store an optional ``image`` file before the wrapped handler runs.

    The parsed body lands in ``g.payload``; when a file was stored its public
    URL is set under ``imageUrl``. Any failure returns early, so the handler
    (and its database write) never runs.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        payload = request_payload()
        g.payload = payload

        unexpected = [name for name in request.files if name != IMAGE_FIELD]
        if unexpected:
            return jsonify({"message": f"Unexpected file field: {unexpected[0]}"}), 400

        files = [f for f in request.files.getlist(IMAGE_FIELD) if f.filename]
        if not files:
            return fn(*args, **kwargs)
        if len(files) > 1:
            return jsonify({"message": "Only one image may be attached"}), 400

        upload = files[0]
        data = upload.read()
        limit = current_app.config["MAX_IMAGE_BYTES"]
        if len(data) > limit:
            return jsonify({"message": f"Image exceeds the {limit // (1024 * 1024)} MB limit"}), 400

        key = object_key(upload.filename)
        storage = current_app.extensions["image_storage"]
        try:
            url = storage.save(data, key, upload.mimetype or "application/octet-stream")
        except ImageStorageError as e:
            current_app.logger.error("Image upload failed for %s: %s", key, e)
            return jsonify({"message": str(e)}), 500

        current_app.logger.info("Stored image %s", key)
        if isinstance(payload, dict):
            payload[IMAGE_URL_FIELD] = url
        return fn(*args, **kwargs)
    return wrapper
