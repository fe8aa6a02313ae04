"""Backend settings resolved once at startup and handed to the gateways."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

BACKEND_SQL = "sql"
BACKEND_APPWRITE = "appwrite"

# Options every deployment needs, keyed by backend kind.
_REQUIRED_OPTIONS: dict[str, tuple[str, ...]] = {
    BACKEND_SQL: (
        "endpoint",
        "files_collection_id",
        "questions_collection_id",
        "question_images_bucket_id",
        "source_files_bucket_id",
        "bridge_token",
    ),
    BACKEND_APPWRITE: (
        "endpoint",
        "project_id",
        "api_key",
        "database_id",
        "files_collection_id",
        "questions_collection_id",
        "question_images_bucket_id",
        "source_files_bucket_id",
        "bridge_token",
    ),
}

_CONFIG_KEYS = {
    "backend": "QBANK_BACKEND",
    "endpoint": "QBANK_ENDPOINT",
    "project_id": "QBANK_PROJECT_ID",
    "api_key": "QBANK_API_KEY",
    "database_id": "QBANK_DATABASE_ID",
    "files_collection_id": "QBANK_FILES_COLLECTION_ID",
    "questions_collection_id": "QBANK_QUESTIONS_COLLECTION_ID",
    "question_images_bucket_id": "QBANK_QUESTION_IMAGES_BUCKET_ID",
    "source_files_bucket_id": "QBANK_SOURCE_FILES_BUCKET_ID",
    "bridge_token": "BRIDGE_API_TOKEN",
}


class ConfigurationError(RuntimeError):
    """Raised when required backend options are missing in strict mode."""


@dataclass(frozen=True)
class BackendSettings:
    backend: str
    endpoint: str
    project_id: str
    api_key: str
    database_id: str
    files_collection_id: str
    questions_collection_id: str
    question_images_bucket_id: str
    source_files_bucket_id: str
    bridge_token: str
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.5
    bridge_files_limit: int = 100
    bridge_questions_limit: int = 500

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "BackendSettings":
        values = {
            field: str(config.get(key) or "").strip() for field, key in _CONFIG_KEYS.items()
        }
        values["backend"] = (values["backend"] or BACKEND_SQL).lower()
        values["endpoint"] = values["endpoint"].rstrip("/")
        return cls(
            **values,
            connect_timeout=float(config.get("QBANK_CONNECT_TIMEOUT_SEC", 10)),
            read_timeout=float(config.get("QBANK_READ_TIMEOUT_SEC", 30)),
            max_retries=max(1, int(config.get("QBANK_MAX_RETRIES", 3))),
            retry_backoff=float(config.get("QBANK_RETRY_BACKOFF", 0.5)),
            bridge_files_limit=int(config.get("BRIDGE_FILES_LIMIT", 100)),
            bridge_questions_limit=int(config.get("BRIDGE_QUESTIONS_LIMIT", 500)),
        )

    def missing_options(self) -> list[str]:
        """Return the environment variable names of required options left empty."""

        required = _REQUIRED_OPTIONS.get(self.backend)
        if required is None:
            return [_CONFIG_KEYS["backend"]]
        return [_CONFIG_KEYS[name] for name in required if not getattr(self, name)]

    def object_view_url(self, bucket_id: str, object_id: str) -> str:
        """Public view URL for a stored object, empty when there is no object."""

        if not object_id:
            return ""
        return (
            f"{self.endpoint}/storage/buckets/{quote(bucket_id)}/files/"
            f"{quote(object_id)}/view?project={quote(self.project_id)}"
        )

    def image_url(self, image_id: str | None) -> str:
        return self.object_view_url(self.question_images_bucket_id, image_id or "")
