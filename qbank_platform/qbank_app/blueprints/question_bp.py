"""Read-only browsing of questions."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from ..gateway import get_backend
from ..schemas import QuestionFiltersSchema
from ..services import question_service
from .common import respond

question_bp = Blueprint("question_bp", __name__)

question_filters_schema = QuestionFiltersSchema()


@question_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@question_bp.get("/ping")
def ping():
    return jsonify({"module": "questions", "status": "ok"})


@question_bp.get("")
@jwt_required()
def list_questions():
    filters = question_filters_schema.load(request.args.to_dict())
    return respond(question_service.list_questions(get_backend(), **filters))


@question_bp.get("/<question_id>")
@jwt_required()
def get_question(question_id: str):
    return respond(question_service.get_question(get_backend(), question_id))
