"""Operational endpoints: Prometheus metrics and a health probe."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify

from ..gateway import get_backend
from ..metrics import latest_metrics

metrics_bp = Blueprint("metrics_bp", __name__)


@metrics_bp.get("/metrics")
def metrics():
    payload, content_type = latest_metrics()
    return Response(payload, mimetype=content_type)


@metrics_bp.get("/healthz")
def healthz():
    """Report the persistence backend kind and any missing configuration."""

    settings = get_backend().settings
    missing = settings.missing_options()
    body = {"status": "degraded" if missing else "ok", "backend": settings.backend}
    if missing:
        body["missing"] = missing
    return jsonify(body), HTTPStatus.SERVICE_UNAVAILABLE if missing else HTTPStatus.OK
