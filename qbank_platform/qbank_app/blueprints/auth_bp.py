"""Authentication endpoints (register/login/me)."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError
from sqlalchemy import func

from ..extensions import db
from ..models import User
from ..schemas import LoginSchema, RegisterSchema, UserSchema
from ..utils import READER_ROLE, generate_access_token, hash_password, verify_password
from .common import json_payload

auth_bp = Blueprint("auth_bp", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()


@auth_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@auth_bp.get("/ping")
def ping():
    return jsonify({"module": "auth", "status": "ok"})


@auth_bp.post("/register")
def register():
    payload = register_schema.load(json_payload())
    username = payload["username"].lower()
    if User.query.filter(func.lower(User.username) == username).first():
        return jsonify({"message": "Username already taken"}), HTTPStatus.CONFLICT

    user = User(
        username=username,
        name=payload["name"].strip(),
        password_hash=hash_password(payload["password"]),
        role=READER_ROLE,
    )
    db.session.add(user)
    db.session.commit()
    return (
        jsonify({"access_token": generate_access_token(user), "user": user_schema.dump(user)}),
        HTTPStatus.CREATED,
    )


@auth_bp.post("/login")
def login():
    payload = login_schema.load(json_payload())
    username = payload["username"].strip().lower()
    user = User.query.filter(func.lower(User.username) == username).first()
    if not user or not verify_password(payload["password"], user.password_hash):
        return jsonify({"message": "Invalid username or password"}), HTTPStatus.UNAUTHORIZED
    return jsonify({"access_token": generate_access_token(user), "user": user_schema.dump(user)})


@auth_bp.get("/me")
@jwt_required()
def me():
    return jsonify({"user": user_schema.dump(current_user)})
