"""Flask extension singletons bound to the app in ``create_app``."""

from __future__ import annotations

from pathlib import Path

from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"

db: SQLAlchemy = SQLAlchemy()
migrate: Migrate = Migrate(directory=str(MIGRATIONS_DIR))
jwt: JWTManager = JWTManager()
cors: CORS = CORS()
# Limits come from RATELIMIT_DEFAULT and BRIDGE_RATE_LIMIT.
limiter: Limiter = Limiter(key_func=get_remote_address)
