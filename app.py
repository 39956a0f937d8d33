"""
ProTimer: Flask Web Application

JSON REST backend for task scheduling, habit tracking, flashcards, meeting
notes, Pomodoro study sessions and study groups with leaderboards.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Flask, Response, jsonify, request as flask_request
from flask_session import Session
from flask_wtf.csrf import CSRFError, CSRFProtect, generate_csrf
from werkzeug.exceptions import HTTPException

import database
from auth import auth_bp, login_manager
from blueprints import register_blueprints
from extensions import limiter
from group_stats import GroupNotFound
from logging_config import init_logging

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "XSRF-TOKEN"


def _init_sessions(app: Flask) -> None:
    """Server-side sessions: Redis if REDIS_URL is set, filesystem otherwise."""
    redis_url = app.config.get("REDIS_URL", "")
    if redis_url:
        import redis

        app.config["SESSION_TYPE"] = "redis"
        app.config["SESSION_REDIS"] = redis.Redis.from_url(redis_url)
    else:
        app.config.setdefault("SESSION_TYPE", "filesystem")
    Session(app)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(GroupNotFound)
    def group_not_found(exc: GroupNotFound):
        return jsonify({"message": "Study group not found"}), 404

    @app.errorhandler(CSRFError)
    def csrf_error(exc: CSRFError):
        return jsonify({"message": exc.description or "CSRF token missing or invalid"}), 400

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        if exc.code == 429:
            return jsonify({"message": "Too many requests, slow down"}), 429
        return jsonify({"message": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def unhandled_error(exc: Exception):
        logger.exception("Unhandled error on %s %s", flask_request.method, flask_request.path)
        return jsonify({"message": "Internal server error"}), 500


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    from config import config_by_name
    env = os.environ.get("FLASK_ENV", "development")
    if test_config is not None:
        app.config.from_object(config_by_name["testing"])
        app.config.update(test_config)
    else:
        cfg = config_by_name.get(env, config_by_name["development"])
        app.config.from_object(cfg)
        if hasattr(cfg, "validate"):
            cfg.validate()

    # CSRF protection; the SPA reads the token from a cookie and echoes it in X-CSRFToken
    CSRFProtect(app)

    # Server-side sessions (tests keep Flask's signed-cookie sessions)
    if not app.config.get("TESTING"):
        _init_sessions(app)

    # Structured logging
    init_logging(app)

    # Register database teardown
    database.init_app(app)

    # Rate limiter (disabled in testing)
    limiter.init_app(app)
    if app.config.get("TESTING"):
        limiter.enabled = False

    # Register auth blueprint and login manager
    app.register_blueprint(auth_bp)
    login_manager.init_app(app)

    # Register all application blueprints
    register_blueprints(app)

    _register_error_handlers(app)

    @app.after_request
    def set_csrf_cookie(response: Response) -> Response:
        if app.config.get("WTF_CSRF_ENABLED", True) and flask_request.path.startswith("/api/"):
            response.set_cookie(
                CSRF_COOKIE_NAME,
                generate_csrf(),
                samesite="Lax",
                secure=app.config.get("SESSION_COOKIE_SECURE", False),
            )
        return response

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        response.headers["Cache-Control"] = "no-store"
        if not app.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5001)
