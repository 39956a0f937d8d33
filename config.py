"""
Application configuration: environment-aware settings.

All environment variables are documented here. Values may also come from a
.env file in the project root.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent

load_dotenv(BASE_DIR / ".env")


class BaseConfig:
    # Core Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-production")
    # SQLite database file
    DATABASE = os.environ.get("DATABASE_PATH", str(BASE_DIR / "protimer.db"))
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None

    # Session security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = 7 * 86400
    REMEMBER_COOKIE_HTTPONLY = True

    # Request bodies are small JSON documents
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Redis (sessions + rate limits when set)
    REDIS_URL = os.environ.get("REDIS_URL", "")

    # Rate limiting (defaults to in-memory; set REDIS_URL for Redis-backed)
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "") or "memory://"

    # Server-side sessions (defaults to filesystem; upgraded to Redis when available)
    SESSION_TYPE = "filesystem"
    SESSION_FILE_DIR = os.environ.get("SESSION_FILE_DIR", str(BASE_DIR / "flask_session"))
    SESSION_PERMANENT = True
    SESSION_KEY_PREFIX = "protimer:"

    # Guest mode: tasks and habits kept in the visitor's session only
    GUEST_MODE_ENABLED = os.environ.get("GUEST_MODE_ENABLED", "1") not in ("0", "false", "False")

    # Pomodoro defaults (seconds)
    DEFAULT_FOCUS_SECONDS = int(os.environ.get("DEFAULT_FOCUS_SECONDS", "1500"))
    DEFAULT_BREAK_SECONDS = int(os.environ.get("DEFAULT_BREAK_SECONDS", "300"))

    # Account lockout
    LOCKOUT_THRESHOLD = int(os.environ.get("LOCKOUT_THRESHOLD", "5"))
    LOCKOUT_MINUTES = int(os.environ.get("LOCKOUT_MINUTES", "15"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True

    @classmethod
    def validate(cls):
        """Fail fast on missing or insecure configuration in production."""
        errors: list[str] = []

        if cls.SECRET_KEY in ("dev-key-change-in-production", ""):
            errors.append("SECRET_KEY must be set to a secure value in production.")

        if not cls.DATABASE:
            errors.append("DATABASE_PATH must point to a writable SQLite file.")

        if errors:
            raise RuntimeError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class TestingConfig(BaseConfig):
    TESTING = True
    WTF_CSRF_ENABLED = False


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
