"""Serves objects from the local object store under the hosted view URL scheme."""

from __future__ import annotations

from http import HTTPStatus
from io import BytesIO

from flask import Blueprint, jsonify, send_file

from ..gateway import ObjectNotFound, get_backend
from ..gateway.local_objects import LocalObjectStore

storage_bp = Blueprint("storage_bp", __name__)


@storage_bp.get("/storage/buckets/<bucket_id>/files/<object_id>/view")
def view_object(bucket_id: str, object_id: str):
    backend = get_backend()
    if not isinstance(backend.objects, LocalObjectStore):
        return jsonify({"message": "Not found"}), HTTPStatus.NOT_FOUND
    try:
        data, stored = backend.objects.read_object(bucket_id, object_id)
    except ObjectNotFound:
        return jsonify({"message": "Not found"}), HTTPStatus.NOT_FOUND
    return send_file(
        BytesIO(data),
        mimetype=stored.content_type,
        download_name=stored.filename,
        max_age=3600,
    )
