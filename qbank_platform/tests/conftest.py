"""Pytest configuration for ensuring project modules resolve correctly."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from config import TestConfig
from qbank_app import create_app
from qbank_app.extensions import db
from qbank_app.gateway import EXTENSION_KEY
from qbank_app.models import User
from qbank_app.utils.security import hash_password

ADMIN_PASSWORD = "AdminPass123!"
READER_PASSWORD = "ReaderPass123!"


@pytest.fixture()
def app_with_db(tmp_path):
    class IsolatedTestConfig(TestConfig):
        OBJECT_STORAGE_ROOT = str(tmp_path / "storage")

    app = create_app(IsolatedTestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture()
def backend(app_with_db):
    return app_with_db.extensions[EXTENSION_KEY]


def _create_user(username: str, password: str, role: str) -> None:
    db.session.add(
        User(
            username=username,
            name=username.title(),
            password_hash=hash_password(password),
            role=role,
        )
    )
    db.session.commit()


@pytest.fixture()
def admin_token(app_with_db, client):
    _create_user("admin1", ADMIN_PASSWORD, "admin")
    resp = client.post(
        "/api/auth/login",
        json={"username": "admin1", "password": ADMIN_PASSWORD},
    )
    return resp.get_json()["access_token"]


@pytest.fixture()
def reader_token(app_with_db, client):
    _create_user("reader1", READER_PASSWORD, "user")
    resp = client.post(
        "/api/auth/login",
        json={"username": "reader1", "password": READER_PASSWORD},
    )
    return resp.get_json()["access_token"]
