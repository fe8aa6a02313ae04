"""Password hashing and JWT helpers for admin and reader accounts."""

from __future__ import annotations

from typing import Any, Dict

from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

ADMIN_ROLE = "admin"
READER_ROLE = "user"
ROLES = (READER_ROLE, ADMIN_ROLE)


def hash_password(plain_password: str) -> str:
    return generate_password_hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, plain_password)


def is_admin(user) -> bool:
    return user is not None and user.role == ADMIN_ROLE


def generate_access_token(user) -> str:
    """Create a JWT for ``user``; the role claim lets clients hide admin screens."""

    claims: Dict[str, Any] = {"role": user.role, "username": user.username}
    return create_access_token(identity=str(user.id), additional_claims=claims)
