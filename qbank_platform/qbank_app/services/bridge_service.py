"""Token-gated read/write bridge for partner systems using snake_case fields."""

from __future__ import annotations

import hmac
import logging
from http import HTTPStatus
from typing import Any, Mapping

from marshmallow import ValidationError

from ..gateway import Backend, DocumentNotFound, Query
from ..records import QuestionRecord
from ..schemas.bridge_schema import (
    BridgeFileSchema,
    BridgeQuestionSchema,
    BridgeQuestionUpdateSchema,
)
from ..settings import BackendSettings
from .file_service import load_file
from .question_service import load_question, question_fields

logger = logging.getLogger(__name__)

bridge_files_schema = BridgeFileSchema(many=True)
bridge_question_schema = BridgeQuestionSchema()
bridge_update_schema = BridgeQuestionUpdateSchema()

UPDATE_ROUTE = "update-question"


class BridgeError(Exception):
    def __init__(self, status: int, message: str, details: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


def authorize(settings: BackendSettings, token: str | None) -> None:
    """Reject the request unless ``token`` matches the configured secret.

    An unset secret rejects everything.
    """

    expected = settings.bridge_token
    if not expected or not token:
        raise BridgeError(HTTPStatus.UNAUTHORIZED, "Invalid or missing API Token")
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise BridgeError(HTTPStatus.UNAUTHORIZED, "Invalid or missing API Token")


def export_question(settings: BackendSettings, record: QuestionRecord) -> dict[str, Any]:
    payload = bridge_question_schema.dump(record)
    payload["question_image_url"] = settings.image_url(record.question_image_id)
    payload["explanation_image_url"] = settings.image_url(record.explanation_image_id)
    return payload


def list_files(backend: Backend) -> list[dict[str, Any]]:
    listing = backend.documents.list_documents(
        backend.files_collection,
        Query(order_by="uploadedAt", descending=True, limit=backend.settings.bridge_files_limit),
    )
    return bridge_files_schema.dump([load_file(doc) for doc in listing.documents])


def list_questions(backend: Backend, file_id: str | None = None) -> list[dict[str, Any]]:
    listing = backend.documents.list_documents(
        backend.questions_collection,
        Query(
            equal={"fileId": file_id} if file_id else {},
            order_by="orderIndex",
            limit=backend.settings.bridge_questions_limit,
        ),
    )
    return [export_question(backend.settings, load_question(doc)) for doc in listing.documents]


def get_question(backend: Backend, question_id: str | None) -> dict[str, Any]:
    if not question_id:
        raise BridgeError(HTTPStatus.BAD_REQUEST, "Missing question ID")
    try:
        document = backend.documents.get_document(backend.questions_collection, question_id)
    except DocumentNotFound as exc:
        raise BridgeError(HTTPStatus.NOT_FOUND, "Question not found") from exc
    return export_question(backend.settings, load_question(document))


def read(backend: Backend, route: str | None, args: Mapping[str, str]) -> Any:
    if route == "files":
        return list_files(backend)
    if route == "questions":
        return list_questions(backend, args.get("file_id"))
    if route == "question":
        return get_question(backend, args.get("id"))
    raise BridgeError(HTTPStatus.NOT_FOUND, "Route not found or not specified")


def update_question(backend: Backend, body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise BridgeError(HTTPStatus.BAD_REQUEST, "Request body must be a JSON object")
    question_id = body.get("id")
    if not question_id:
        raise BridgeError(HTTPStatus.BAD_REQUEST, "Missing question ID")
    try:
        changes = bridge_update_schema.load(body)
    except ValidationError as err:
        raise BridgeError(HTTPStatus.BAD_REQUEST, "Invalid field values", err.messages) from err
    try:
        backend.documents.update_document(
            backend.questions_collection, str(question_id), question_fields(changes)
        )
    except DocumentNotFound as exc:
        raise BridgeError(HTTPStatus.NOT_FOUND, "Question not found") from exc
    logger.info(
        "Question updated through bridge",
        extra={"question_id": str(question_id), "fields": sorted(changes)},
    )
    return {"success": True, "message": "Question updated"}


def write(backend: Backend, route: str | None, body: Any) -> dict[str, Any]:
    if route != UPDATE_ROUTE:
        raise BridgeError(HTTPStatus.BAD_REQUEST, "Invalid route for POST")
    return update_question(backend, body)
