"""Question file (collection) service functions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

from ..gateway import Backend, Query
from ..records import FileRecord
from ..schemas.question_schema import FileDocumentSchema, FileFieldsSchema
from .best_effort import best_effort
from .question_service import delete_question_images, load_question
from .results import action, paginated

logger = logging.getLogger(__name__)

file_document_schema = FileDocumentSchema()
file_fields_schema = FileFieldsSchema()

SORT_ATTRIBUTES = {
    "name": "displayName",
    "uploaded": "uploadedAt",
    "questions": "totalQuestions",
}
CASCADE_BATCH_SIZE = 100


def timestamp() -> str:
    """Current instant in the backend's ISO-8601 form."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def load_file(document: dict[str, Any]) -> FileRecord:
    return file_document_schema.load(document)


def dump_file(record: FileRecord) -> dict[str, Any]:
    return file_document_schema.dump(record)


def file_fields(values: dict[str, Any]) -> dict[str, Any]:
    return file_fields_schema.dump(values)


def fetch_file(backend: Backend, file_id: str) -> FileRecord:
    return load_file(backend.documents.get_document(backend.files_collection, file_id))


def add_file(
    backend: Backend,
    *,
    original_filename: str,
    display_name: str = "",
    storage_file_id: Optional[str] = None,
    total_questions: int = 0,
    uploaded_by: Optional[str] = None,
) -> FileRecord:
    document = backend.documents.create_document(
        backend.files_collection,
        file_fields(
            {
                "original_filename": original_filename,
                "display_name": display_name or original_filename,
                "storage_file_id": storage_file_id,
                "total_questions": total_questions,
                "uploaded_by": uploaded_by,
                "uploaded_at": timestamp(),
            }
        ),
    )
    return load_file(document)


@action("list_files")
def list_files(
    backend: Backend,
    *,
    search: str = "",
    sort_by: str = "uploaded",
    sort_order: str = "desc",
    page: int = 1,
    page_size: int = 25,
):
    search = (search or "").strip()
    listing = backend.documents.list_documents(
        backend.files_collection,
        Query(
            search=("displayName", search) if search else None,
            order_by=SORT_ATTRIBUTES.get(sort_by, "uploadedAt"),
            descending=sort_order != "asc",
            limit=page_size,
            offset=(page - 1) * page_size,
        ),
    )
    documents = [dump_file(load_file(doc)) for doc in listing.documents]
    return paginated(documents, listing.total, page, page_size)


@action("get_file", not_found="File not found")
def get_file(backend: Backend, file_id: str):
    return dump_file(fetch_file(backend, file_id))


@action("create_file", status=HTTPStatus.CREATED)
def create_file(
    backend: Backend,
    original_filename: str,
    display_name: str = "",
    storage_file_id: Optional[str] = None,
    uploaded_by: Optional[str] = None,
):
    record = add_file(
        backend,
        original_filename=original_filename,
        display_name=display_name,
        storage_file_id=storage_file_id,
        uploaded_by=uploaded_by,
    )
    logger.info("File created", extra={"file_id": record.id})
    return dump_file(record)


@action("update_file", not_found="File not found")
def update_file(backend: Backend, file_id: str, changes: dict[str, Any]):
    document = backend.documents.update_document(
        backend.files_collection, file_id, file_fields(changes)
    )
    return dump_file(load_file(document))


@action("delete_file", not_found="File not found")
def delete_file(backend: Backend, file_id: str):
    """Delete a file after its questions, their images and the source object.

    The cascade is not atomic: a failure midway leaves the file with the
    questions that were not yet removed.
    """

    record = fetch_file(backend, file_id)
    deleted = 0
    while True:
        batch = backend.documents.list_documents(
            backend.questions_collection,
            Query(equal={"fileId": file_id}, limit=CASCADE_BATCH_SIZE),
        )
        if not batch.documents:
            break
        for document in batch.documents:
            question = load_question(document)
            delete_question_images(backend, question)
            backend.documents.delete_document(backend.questions_collection, question.id)
            deleted += 1

    if record.storage_file_id:
        best_effort(
            "delete_source_file",
            backend.objects.delete_object,
            backend.sources_bucket,
            record.storage_file_id,
        )
    backend.documents.delete_document(backend.files_collection, file_id)
    logger.info("File deleted", extra={"file_id": file_id, "question_count": deleted})
    return {"id": file_id, "deletedQuestions": deleted}
