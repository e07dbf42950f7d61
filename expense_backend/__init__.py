# expense_backend/__init__.py
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Any, Optional

import click
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import DEFAULT_JWT_SECRET
from .errors import register_error_handlers
from .extensions import db, jwt, migrate
from .security import register_jwt_handlers
from .storage import ImageStorage, LocalImageStorage, build_image_storage
from .uploads import InMemoryUploadRequest
from .uploads import bp as uploads_bp

SERVICE_NAME = "expense-tracker-backend"


# --- Config ------------------------------------------------------------------
def _get_allowed_origins(app: Flask) -> list[str]:
    """Allowed CORS origins: the fixed dev list plus CORS_ALLOWED_ORIGINS."""
    default = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]
    extra = app.config.get("CORS_ALLOWED_ORIGINS") or ""
    extra_list = [o.strip() for o in extra.split(",") if o.strip()]
    return sorted(set(default + extra_list))


LOG_FORMAT = (
    '{"ts":"%(asctime)s","service":"' + SERVICE_NAME + '",'
    '"level":"%(levelname)s","logger":"%(name)s","msg":"%(message)s"}'
)


def _configure_logging(app: Flask) -> None:
    """One JSON-ish line per record on stdout, level from LOG_LEVEL."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level)
    app.logger.setLevel(level)

    # create_app() runs once per test and on every reload
    if any(getattr(h, "_expense_backend", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler._expense_backend = True
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    CORS(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins(app)}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )


def _configure_proxy(app: Flask) -> None:
    """Trust X-Forwarded-* from PROXY_FIX_HOPS proxies (0 disables)."""
    hops = int(app.config.get("PROXY_FIX_HOPS", 1))
    if hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)  # type: ignore


def _init_extensions(app: Flask, image_storage: Optional[ImageStorage]) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    register_jwt_handlers(jwt)

    if app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET:
        app.logger.warning("JWT_SECRET is not set; tokens are signed with the built-in development secret.")

    if image_storage is None:
        image_storage = build_image_storage(app.config)
    app.extensions["image_storage"] = image_storage


def _register_blueprints(app: Flask) -> None:
    from .routes import auth_bp, expenses_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(expenses_bp)
    if isinstance(app.extensions["image_storage"], LocalImageStorage):
        app.register_blueprint(uploads_bp)


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create all tables without running migrations."""
        db.create_all()
        click.echo("Database tables created.")


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None, image_storage: Optional[ImageStorage] = None) -> Flask:
    """
    Standard Flask application factory.

    `config_object` may be a config class or a dotted path to one
    (e.g. "expense_backend.config.TestingConfig"); None reads CONFIG_CLASS
    and defaults to expense_backend.config.Config.

    `image_storage` replaces the backend chosen by IMAGE_STORAGE.
    """
    app = Flask(__name__)
    app.request_class = InMemoryUploadRequest

    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS", "expense_backend.config.Config")
    app.config.from_object(config_object)
    app.config["UPLOAD_FOLDER"] = os.path.abspath(app.config["UPLOAD_FOLDER"])
    app.json.sort_keys = app.config.get("JSON_SORT_KEYS", False)

    _configure_logging(app)
    _configure_proxy(app)
    _configure_cors(app)

    _init_extensions(app, image_storage)
    _register_blueprints(app)
    _register_cli(app)
    register_error_handlers(app)

    # --------- Health & root routes ----------
    @app.get(app.config["API_PREFIX"] + "/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "time": datetime.utcnow().isoformat() + "Z",
                "service": SERVICE_NAME,
            }
        ), 200

    @app.get("/")
    def root():
        return jsonify({"message": "Welcome to the Expense Tracker API"}), 200

    return app
