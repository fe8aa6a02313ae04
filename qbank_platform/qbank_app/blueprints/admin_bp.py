"""Admin blueprint endpoints (collections, CSV ingestion, questions, images)."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError

from ..gateway import get_backend
from ..schemas import (
    CSVUploadFormSchema,
    FileCreateSchema,
    FileUpdateSchema,
    QuestionInputSchema,
    ReorderSchema,
)
from ..services import file_service, image_service, ingest_service, question_service
from ..services.ingest_service import CSVUpload
from .common import forbidden, json_payload, require_admin, respond

admin_bp = Blueprint("admin_bp", __name__)

file_create_schema = FileCreateSchema()
file_update_schema = FileUpdateSchema()
csv_upload_form_schema = CSVUploadFormSchema()
question_input_schema = QuestionInputSchema()
reorder_schema = ReorderSchema()


@admin_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@admin_bp.get("/ping")
def ping():
    return jsonify({"module": "admin", "status": "ok"})


@admin_bp.post("/files")
@jwt_required()
def create_file():
    if not require_admin():
        return forbidden()
    payload = file_create_schema.load(json_payload())
    return respond(
        file_service.create_file(
            get_backend(),
            payload["original_filename"],
            display_name=payload["display_name"],
            uploaded_by=str(current_user.id),
        )
    )


@admin_bp.patch("/files/<file_id>")
@jwt_required()
def update_file(file_id: str):
    if not require_admin():
        return forbidden()
    changes = file_update_schema.load(json_payload())
    if not changes:
        return jsonify({"errors": {"_schema": ["No changes supplied."]}}), HTTPStatus.BAD_REQUEST
    return respond(file_service.update_file(get_backend(), file_id, changes))


@admin_bp.delete("/files/<file_id>")
@jwt_required()
def delete_file(file_id: str):
    if not require_admin():
        return forbidden()
    return respond(file_service.delete_file(get_backend(), file_id))


@admin_bp.post("/files/upload")
@jwt_required()
def upload_csv():
    if not require_admin():
        return forbidden()
    options = csv_upload_form_schema.load(request.form.to_dict())
    upload = CSVUpload.from_storage(request.files.get("file"))
    return respond(
        ingest_service.create_from_csv(
            get_backend(),
            upload,
            display_name=options["display_name"].strip(),
            convert_zero_indexed=options["convert_zero_indexed"],
            uploaded_by=str(current_user.id),
        )
    )


@admin_bp.post("/files/<file_id>/merge")
@jwt_required()
def merge_csv(file_id: str):
    if not require_admin():
        return forbidden()
    options = csv_upload_form_schema.load(request.form.to_dict())
    upload = CSVUpload.from_storage(request.files.get("file"))
    return respond(
        ingest_service.merge_into_collection(
            get_backend(),
            file_id,
            upload,
            convert_zero_indexed=options["convert_zero_indexed"],
        )
    )


@admin_bp.put("/files/<file_id>/order")
@jwt_required()
def reorder_questions(file_id: str):
    if not require_admin():
        return forbidden()
    payload = reorder_schema.load(json_payload())
    return respond(
        question_service.reorder_questions(get_backend(), file_id, payload["question_ids"])
    )


@admin_bp.post("/files/<file_id>/questions")
@jwt_required()
def create_question(file_id: str):
    if not require_admin():
        return forbidden()
    values = question_input_schema.load(json_payload())
    values.pop("file_id", None)
    values.pop("order_index", None)
    return respond(question_service.create_question(get_backend(), file_id, values))


@admin_bp.patch("/questions/<question_id>")
@jwt_required()
def update_question(question_id: str):
    if not require_admin():
        return forbidden()
    changes = question_input_schema.load(json_payload(), partial=True)
    return respond(question_service.update_question(get_backend(), question_id, changes))


@admin_bp.delete("/questions/<question_id>")
@jwt_required()
def delete_question(question_id: str):
    if not require_admin():
        return forbidden()
    return respond(question_service.delete_question(get_backend(), question_id))


@admin_bp.post("/images")
@jwt_required()
def upload_image():
    if not require_admin():
        return forbidden()
    image = request.files.get("file")
    return respond(
        image_service.upload_image(
            get_backend(),
            image.filename if image else None,
            image.read() if image else b"",
            image.mimetype if image else None,
            max_bytes=current_app.config.get("IMAGE_MAX_BYTES", image_service.DEFAULT_MAX_IMAGE_BYTES),
        )
    )


@admin_bp.delete("/images/<image_id>")
@jwt_required()
def delete_image(image_id: str):
    if not require_admin():
        return forbidden()
    return respond(image_service.delete_image(get_backend(), image_id))
