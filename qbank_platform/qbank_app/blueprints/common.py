"""Helpers shared by the REST blueprints."""

from __future__ import annotations

from http import HTTPStatus

from flask import jsonify, request
from flask_jwt_extended import current_user

from ..services.results import ActionResult
from ..utils.security import is_admin


def require_admin() -> bool:
    return is_admin(current_user)


def forbidden():
    return jsonify({"message": "Forbidden"}), HTTPStatus.FORBIDDEN


def respond(result: ActionResult):
    return jsonify(result.to_dict()), result.status


def json_payload() -> dict:
    return request.get_json(silent=True) or {}
