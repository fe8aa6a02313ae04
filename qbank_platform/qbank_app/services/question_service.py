"""Question CRUD service functions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from ..gateway import Backend, Query
from ..records import QuestionRecord
from ..schemas.question_schema import QuestionDocumentSchema, QuestionFieldsSchema
from ..utils.answers import answer_notations
from .best_effort import best_effort
from .results import action, paginated

logger = logging.getLogger(__name__)

question_document_schema = QuestionDocumentSchema()
question_fields_schema = QuestionFieldsSchema()

IMAGE_ATTRIBUTES = ("question_image_id", "explanation_image_id")


def load_question(document: dict[str, Any]) -> QuestionRecord:
    return question_document_schema.load(document)


def dump_question(record: QuestionRecord) -> dict[str, Any]:
    return question_document_schema.dump(record)


def question_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Translate attribute-named values into document attributes."""

    return question_fields_schema.dump(values)


def fetch_question(backend: Backend, question_id: str) -> QuestionRecord:
    return load_question(backend.documents.get_document(backend.questions_collection, question_id))


def max_order_index(backend: Backend, file_id: str) -> int:
    """Highest orderIndex used in a file, -1 when it has no questions."""

    listing = backend.documents.list_documents(
        backend.questions_collection,
        Query(equal={"fileId": file_id}, order_by="orderIndex", descending=True, limit=1),
    )
    if not listing.documents:
        return -1
    return load_question(listing.documents[0]).order_index


def delete_question_images(backend: Backend, record: QuestionRecord) -> None:
    for image_id in record.image_ids:
        best_effort("delete_question_image", backend.objects.delete_object, backend.images_bucket, image_id)


@action("list_questions")
def list_questions(
    backend: Backend,
    *,
    file_id: Optional[str] = None,
    section: Optional[str] = None,
    type: Optional[int] = None,
    answer: Optional[str] = None,
    search: str = "",
    page: int = 1,
    page_size: int = 25,
):
    equal: dict[str, Any] = {}
    if file_id:
        equal["fileId"] = file_id
    if section and section != "0":
        equal["section"] = section
    if type is not None:
        equal["type"] = type
    if answer and answer.strip():
        equal["answer"] = answer_notations(answer)
    search = (search or "").strip()
    listing = backend.documents.list_documents(
        backend.questions_collection,
        Query(
            equal=equal,
            search=("questionText", search) if search else None,
            order_by="orderIndex",
            limit=page_size,
            offset=(page - 1) * page_size,
        ),
    )
    documents = [dump_question(load_question(doc)) for doc in listing.documents]
    return paginated(documents, listing.total, page, page_size)


@action("get_question", not_found="Question not found")
def get_question(backend: Backend, question_id: str):
    return dump_question(fetch_question(backend, question_id))


@action("create_question", status=HTTPStatus.CREATED, not_found="File not found")
def create_question(backend: Backend, file_id: str, values: dict[str, Any]):
    """Append a manually written question to the end of a file."""

    backend.documents.get_document(backend.files_collection, file_id)
    fields = question_fields(
        {**values, "file_id": file_id, "order_index": max_order_index(backend, file_id) + 1}
    )
    document = backend.documents.create_document(backend.questions_collection, fields)
    backend.documents.increment(backend.files_collection, file_id, "totalQuestions", 1)
    logger.info(
        "Question created", extra={"file_id": file_id, "question_id": document["$id"]}
    )
    return dump_question(load_question(document))


@action("update_question", not_found="Question not found")
def update_question(backend: Backend, question_id: str, changes: dict[str, Any]):
    """Apply a partial update; replaced or cleared images are removed afterwards."""

    current = fetch_question(backend, question_id)
    changes = {key: value for key, value in changes.items() if key not in ("file_id", "order_index")}
    document = backend.documents.update_document(
        backend.questions_collection, question_id, question_fields(changes)
    )
    for attribute in IMAGE_ATTRIBUTES:
        if attribute not in changes:
            continue
        previous = getattr(current, attribute)
        if previous and previous != changes[attribute]:
            best_effort(
                "delete_replaced_image",
                backend.objects.delete_object,
                backend.images_bucket,
                previous,
            )
    return dump_question(load_question(document))


@action("delete_question", not_found="Question not found")
def delete_question(backend: Backend, question_id: str):
    record = fetch_question(backend, question_id)
    delete_question_images(backend, record)
    backend.documents.delete_document(backend.questions_collection, question_id)
    backend.documents.increment(
        backend.files_collection, record.file_id, "totalQuestions", -1, minimum=0
    )
    logger.info(
        "Question deleted", extra={"file_id": record.file_id, "question_id": question_id}
    )
    return {"id": question_id, "fileId": record.file_id}


@action("reorder_questions", not_found="Question not found")
def reorder_questions(backend: Backend, file_id: str, question_ids: list[str]):
    """Rewrite orderIndex so that it follows the given id sequence."""

    for position, question_id in enumerate(question_ids):
        backend.documents.update_document(
            backend.questions_collection, question_id, {"orderIndex": position}
        )
    return {"fileId": file_id, "count": len(question_ids)}
