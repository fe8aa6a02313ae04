"""Persistence gateway: document and object stores behind one handle."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from flask import Flask, current_app

from ..settings import BACKEND_APPWRITE, BackendSettings
from .base import (
    DocumentList,
    DocumentNotFound,
    DocumentStore,
    GatewayError,
    ObjectNotFound,
    ObjectStore,
    Query,
    StoredObject,
)

EXTENSION_KEY = "qbank_backend"


@dataclass
class Backend:
    settings: BackendSettings
    documents: DocumentStore
    objects: ObjectStore

    @property
    def files_collection(self) -> str:
        return self.settings.files_collection_id

    @property
    def questions_collection(self) -> str:
        return self.settings.questions_collection_id

    @property
    def images_bucket(self) -> str:
        return self.settings.question_images_bucket_id

    @property
    def sources_bucket(self) -> str:
        return self.settings.source_files_bucket_id


def build_backend(settings: BackendSettings, storage_root: Path | str) -> Backend:
    if settings.backend == BACKEND_APPWRITE:
        from .appwrite import AppwriteClient, AppwriteDocumentStore, AppwriteObjectStore

        client = AppwriteClient(settings)
        return Backend(settings, AppwriteDocumentStore(client), AppwriteObjectStore(client))

    from .local_objects import LocalObjectStore
    from .sql_store import SqlDocumentStore

    return Backend(settings, SqlDocumentStore(settings), LocalObjectStore(storage_root, settings))


def init_backend(app: Flask, settings: BackendSettings) -> Backend:
    storage_root = app.config.get("OBJECT_STORAGE_ROOT") or Path(app.instance_path) / "storage"
    backend = build_backend(settings, storage_root)
    app.extensions[EXTENSION_KEY] = backend
    return backend


def get_backend() -> Backend:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "Backend",
    "DocumentList",
    "DocumentNotFound",
    "DocumentStore",
    "GatewayError",
    "ObjectNotFound",
    "ObjectStore",
    "Query",
    "StoredObject",
    "build_backend",
    "get_backend",
    "init_backend",
]
