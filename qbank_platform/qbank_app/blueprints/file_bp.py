"""Read-only browsing of question files."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from ..gateway import get_backend
from ..schemas import FileFiltersSchema
from ..services import file_service
from .common import respond

file_bp = Blueprint("file_bp", __name__)

file_filters_schema = FileFiltersSchema()


@file_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@file_bp.get("/ping")
def ping():
    return jsonify({"module": "files", "status": "ok"})


@file_bp.get("")
@jwt_required()
def list_files():
    filters = file_filters_schema.load(request.args.to_dict())
    return respond(file_service.list_files(get_backend(), **filters))


@file_bp.get("/<file_id>")
@jwt_required()
def get_file(file_id: str):
    return respond(file_service.get_file(get_backend(), file_id))
