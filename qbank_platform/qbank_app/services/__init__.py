"""Business logic modules (CSV ingestion, file/question CRUD, bridge)."""

from . import (
    bridge_service,
    csv_parser,
    file_service,
    image_service,
    ingest_service,
    question_service,
)

__all__ = [
    "bridge_service",
    "csv_parser",
    "file_service",
    "image_service",
    "ingest_service",
    "question_service",
]
