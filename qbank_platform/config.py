"""Application configuration objects."""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from typing import Any, Type

from sqlalchemy.pool import NullPool


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class BaseConfig:
    """Shared defaults across all environments."""

    APP_NAME = "Question Bank"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///qbank_dev.db",
    )
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change_me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_SEC", str(7 * 24 * 3600)))
    )

    # Persistence backend ("sql" keeps documents in the local database,
    # "appwrite" talks to the hosted backend over REST).
    QBANK_BACKEND = os.getenv("QBANK_BACKEND", "sql")
    QBANK_ENDPOINT = os.getenv("QBANK_ENDPOINT", "http://localhost:5080")
    QBANK_PROJECT_ID = os.getenv("QBANK_PROJECT_ID", "")
    QBANK_API_KEY = os.getenv("QBANK_API_KEY", "")
    QBANK_DATABASE_ID = os.getenv("QBANK_DATABASE_ID", "")
    QBANK_FILES_COLLECTION_ID = os.getenv("QBANK_FILES_COLLECTION_ID", "files")
    QBANK_QUESTIONS_COLLECTION_ID = os.getenv("QBANK_QUESTIONS_COLLECTION_ID", "questions")
    QBANK_QUESTION_IMAGES_BUCKET_ID = os.getenv(
        "QBANK_QUESTION_IMAGES_BUCKET_ID", "question-images"
    )
    QBANK_SOURCE_FILES_BUCKET_ID = os.getenv("QBANK_SOURCE_FILES_BUCKET_ID", "source-files")
    QBANK_CONNECT_TIMEOUT_SEC = int(os.getenv("QBANK_CONNECT_TIMEOUT_SEC", "10"))
    QBANK_READ_TIMEOUT_SEC = int(os.getenv("QBANK_READ_TIMEOUT_SEC", "30"))
    QBANK_MAX_RETRIES = int(os.getenv("QBANK_MAX_RETRIES", "3"))
    QBANK_RETRY_BACKOFF = float(os.getenv("QBANK_RETRY_BACKOFF", "0.5"))
    QBANK_STRICT_CONFIG = _flag("QBANK_STRICT_CONFIG")
    OBJECT_STORAGE_ROOT = os.getenv("OBJECT_STORAGE_ROOT", "")
    AUTO_CREATE_SCHEMA = _flag("AUTO_CREATE_SCHEMA", "true")

    BRIDGE_API_TOKEN = os.getenv("BRIDGE_API_TOKEN", "")
    BRIDGE_FILES_LIMIT = int(os.getenv("BRIDGE_FILES_LIMIT", "100"))
    BRIDGE_QUESTIONS_LIMIT = int(os.getenv("BRIDGE_QUESTIONS_LIMIT", "500"))
    BRIDGE_RATE_LIMIT = os.getenv("BRIDGE_RATE_LIMIT", "120 per minute")

    IMAGE_MAX_BYTES = int(os.getenv("IMAGE_MAX_BYTES", str(5 * 1024 * 1024)))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_DEFAULTS = [
        limit.strip()
        for limit in os.getenv("RATE_LIMIT_DEFAULTS", "200 per minute;2000 per day").split(";")
        if limit.strip()
    ]
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    JSON_SORT_KEYS = False
    SQLITE_TIMEOUT_SEC = int(os.getenv("SQLITE_TIMEOUT_SEC", "15"))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": NullPool,
            "connect_args": {"timeout": SQLITE_TIMEOUT_SEC, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        }


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False
    QBANK_STRICT_CONFIG = _flag("QBANK_STRICT_CONFIG", "true")
    AUTO_CREATE_SCHEMA = _flag("AUTO_CREATE_SCHEMA")


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    JWT_SECRET_KEY = "test-secret"
    QBANK_BACKEND = "sql"
    QBANK_ENDPOINT = "http://localhost"
    QBANK_PROJECT_ID = "test-project"
    QBANK_STRICT_CONFIG = False
    BRIDGE_API_TOKEN = "bridge-test-token"
    RATELIMIT_ENABLED = False


CONFIG_ALIASES: dict[str, Type[BaseConfig]] = {
    "dev": DevConfig,
    "development": DevConfig,
    "prod": ProdConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


@lru_cache
def resolve_config(name_or_class: Any) -> Any:
    """Resolve config argument to the object expected by `app.config.from_object`."""

    if name_or_class is None:
        return DevConfig
    if isinstance(name_or_class, str):
        return CONFIG_ALIASES.get(name_or_class, name_or_class)
    return name_or_class
