"""REST API blueprints (auth, browsing, admin, bridge, storage, metrics)."""

from __future__ import annotations

from .admin_bp import admin_bp
from .auth_bp import auth_bp
from .bridge_bp import bridge_bp
from .file_bp import file_bp
from .metrics_bp import metrics_bp
from .question_bp import question_bp
from .storage_bp import storage_bp

BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (file_bp, "/api/files"),
    (question_bp, "/api/questions"),
    (admin_bp, "/api/admin"),
    (bridge_bp, "/api/bridge"),
    (storage_bp, ""),
    (metrics_bp, ""),
)

__all__ = [
    "BLUEPRINTS",
    "admin_bp",
    "auth_bp",
    "bridge_bp",
    "file_bp",
    "metrics_bp",
    "question_bp",
    "storage_bp",
]
