"""CSV ingestion: create a new file from an upload or merge into an existing one.

Questions are written one by one; a backend failure midway keeps the
questions already stored, corrects the file's counter to match them and
reports a `PartialIngestError`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from http import HTTPStatus
from typing import Optional

from werkzeug.datastructures import FileStorage

from ..gateway import Backend, GatewayError
from ..metrics import record_ingest
from ..records import ParsedQuestionRow
from .best_effort import best_effort
from .csv_parser import decode_csv, parse_csv
from .file_service import add_file
from .question_service import max_order_index, question_fields
from .results import ActionError, action

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"


class IngestError(ActionError):
    """The upload was rejected before anything was written."""


class PartialIngestError(ActionError):
    status = HTTPStatus.BAD_GATEWAY

    def __init__(self, file_id: str, persisted: int, expected: int, cause: Exception):
        super().__init__(
            f"Stored {persisted} of {expected} questions before the storage backend failed",
            data={"fileId": file_id, "questionCount": persisted},
        )
        self.file_id = file_id
        self.persisted = persisted
        self.expected = expected
        self.cause = cause


@dataclass(frozen=True)
class CSVUpload:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @classmethod
    def from_storage(cls, storage: FileStorage | None) -> "CSVUpload | None":
        if storage is None or not storage.filename:
            return None
        return cls(
            filename=storage.filename,
            content=storage.read(),
            content_type=storage.mimetype or None,
        )


def validate_upload(upload: CSVUpload | None) -> CSVUpload:
    if upload is None or not upload.filename:
        raise IngestError("No file provided")
    if not upload.filename.lower().endswith(".csv"):
        raise IngestError("Only CSV files are allowed")
    return upload


def _parse_upload(upload: CSVUpload, convert_zero_indexed: bool) -> list[ParsedQuestionRow]:
    rows = parse_csv(decode_csv(upload.content), convert_zero_indexed)
    if not rows:
        raise IngestError("No valid questions found in CSV")
    return rows


def _persist_rows(
    backend: Backend, file_id: str, rows: list[ParsedQuestionRow], first_index: int
) -> int:
    persisted = 0
    for position, row in enumerate(rows):
        fields = question_fields(
            {**asdict(row), "file_id": file_id, "order_index": first_index + position}
        )
        try:
            backend.documents.create_document(backend.questions_collection, fields)
        except GatewayError as exc:
            raise PartialIngestError(file_id, persisted, len(rows), exc) from exc
        persisted += 1
    return persisted


@action("create_from_csv", status=HTTPStatus.CREATED)
def create_from_csv(
    backend: Backend,
    upload: CSVUpload | None,
    *,
    display_name: str = "",
    convert_zero_indexed: bool = False,
    uploaded_by: Optional[str] = None,
):
    """Create a file from a CSV upload, numbering its questions from 0."""

    upload = validate_upload(upload)
    rows = _parse_upload(upload, convert_zero_indexed)

    stored = best_effort(
        "store_source_file",
        backend.objects.put_object,
        backend.sources_bucket,
        upload.content,
        filename=upload.filename,
        content_type=upload.content_type or CSV_CONTENT_TYPE,
    )
    record = add_file(
        backend,
        original_filename=upload.filename,
        display_name=display_name,
        storage_file_id=stored.value.id if stored.ok else None,
        total_questions=len(rows),
        uploaded_by=uploaded_by,
    )

    try:
        _persist_rows(backend, record.id, rows, 0)
    except PartialIngestError as exc:
        record_ingest("create", exc.persisted)
        best_effort(
            "correct_question_count",
            backend.documents.increment,
            backend.files_collection,
            record.id,
            "totalQuestions",
            exc.persisted - exc.expected,
            minimum=0,
        )
        raise

    record_ingest("create", len(rows))
    logger.info(
        "CSV ingested into new file",
        extra={"file_id": record.id, "question_count": len(rows)},
    )
    return {"fileId": record.id, "questionCount": len(rows)}


@action("merge_into_collection", not_found="File not found")
def merge_into_collection(
    backend: Backend,
    file_id: str,
    upload: CSVUpload | None,
    *,
    convert_zero_indexed: bool = False,
):
    """Append the questions of a CSV upload after the file's last question."""

    upload = validate_upload(upload)
    backend.documents.get_document(backend.files_collection, file_id)
    last_index = max_order_index(backend, file_id)
    rows = _parse_upload(upload, convert_zero_indexed)

    try:
        _persist_rows(backend, file_id, rows, last_index + 1)
    except PartialIngestError as exc:
        record_ingest("merge", exc.persisted)
        if exc.persisted:
            best_effort(
                "correct_question_count",
                backend.documents.increment,
                backend.files_collection,
                file_id,
                "totalQuestions",
                exc.persisted,
            )
        raise

    backend.documents.increment(backend.files_collection, file_id, "totalQuestions", len(rows))
    record_ingest("merge", len(rows))
    logger.info(
        "CSV merged into file",
        extra={"file_id": file_id, "question_count": len(rows), "first_index": last_index + 1},
    )
    return {"fileId": file_id, "questionCount": len(rows)}
