"""External bridge endpoint (``?token=...&route=...``)."""

from __future__ import annotations

import logging
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..extensions import limiter
from ..gateway import GatewayError, get_backend
from ..metrics import record_bridge_request
from ..services import bridge_service
from ..services.bridge_service import BridgeError

logger = logging.getLogger(__name__)

bridge_bp = Blueprint("bridge_bp", __name__)

KNOWN_ROUTES = frozenset({"files", "questions", "question", bridge_service.UPDATE_ROUTE})


def _rate_limit() -> str:
    return current_app.config.get("BRIDGE_RATE_LIMIT", "120 per minute")


def _dispatch(handler):
    backend = get_backend()
    route = request.args.get("route")
    try:
        bridge_service.authorize(backend.settings, request.args.get("token"))
        payload, status = handler(backend, route), HTTPStatus.OK
    except BridgeError as exc:
        payload, status = exc.to_dict(), exc.status
    except GatewayError:
        logger.exception("Bridge %s route=%s failed", request.method, route)
        payload, status = {"error": "Storage backend request failed"}, HTTPStatus.BAD_GATEWAY
    record_bridge_request(request.method, route if route in KNOWN_ROUTES else "other", int(status))
    return jsonify(payload), status


@bridge_bp.get("")
@limiter.limit(_rate_limit)
def bridge_read():
    return _dispatch(lambda backend, route: bridge_service.read(backend, route, request.args))


@bridge_bp.post("")
@limiter.limit(_rate_limit)
def bridge_write():
    return _dispatch(
        lambda backend, route: bridge_service.write(
            backend, route, request.get_json(silent=True)
        )
    )
