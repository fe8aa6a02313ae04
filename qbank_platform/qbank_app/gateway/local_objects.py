"""Filesystem object store (one directory per bucket)."""

from __future__ import annotations

import json
import mimetypes
import re
from pathlib import Path

from ..settings import BackendSettings
from .base import GatewayError, ObjectNotFound, ObjectStore, StoredObject, new_document_id

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,35}$")


class LocalObjectStore(ObjectStore):
    def __init__(self, root: Path | str, settings: BackendSettings):
        self.root = Path(root)
        self._settings = settings

    def _paths(self, bucket: str, object_id: str) -> tuple[Path, Path]:
        if not _SAFE_ID.match(bucket) or not _SAFE_ID.match(object_id):
            raise ObjectNotFound(bucket, object_id)
        directory = self.root / bucket
        return directory / object_id, directory / f"{object_id}.meta.json"

    def put_object(
        self,
        bucket: str,
        data: bytes,
        *,
        filename: str,
        content_type: str | None = None,
        object_id: str | None = None,
    ) -> StoredObject:
        object_id = object_id or new_document_id()
        blob_path, meta_path = self._paths(bucket, object_id)
        content_type = (
            content_type
            or mimetypes.guess_type(filename)[0]
            or "application/octet-stream"
        )
        stored = StoredObject(
            id=object_id,
            bucket=bucket,
            filename=filename,
            size=len(data),
            content_type=content_type,
        )
        try:
            blob_path.parent.mkdir(parents=True, exist_ok=True)
            blob_path.write_bytes(data)
            meta_path.write_text(
                json.dumps({"filename": filename, "content_type": content_type}),
                encoding="utf-8",
            )
        except OSError as exc:
            raise GatewayError(f"Unable to store object in bucket {bucket!r}: {exc}") from exc
        return stored

    def read_object(self, bucket: str, object_id: str) -> tuple[bytes, StoredObject]:
        blob_path, meta_path = self._paths(bucket, object_id)
        if not blob_path.is_file():
            raise ObjectNotFound(bucket, object_id)
        try:
            data = blob_path.read_bytes()
            meta = json.loads(meta_path.read_text(encoding="utf-8")) if meta_path.is_file() else {}
        except (OSError, ValueError) as exc:
            raise GatewayError(f"Unable to read object {object_id!r}: {exc}") from exc
        filename = meta.get("filename") or object_id
        return data, StoredObject(
            id=object_id,
            bucket=bucket,
            filename=filename,
            size=len(data),
            content_type=meta.get("content_type") or "application/octet-stream",
        )

    def delete_object(self, bucket: str, object_id: str) -> None:
        blob_path, meta_path = self._paths(bucket, object_id)
        if not blob_path.is_file():
            raise ObjectNotFound(bucket, object_id)
        try:
            blob_path.unlink()
            meta_path.unlink(missing_ok=True)
        except OSError as exc:
            raise GatewayError(f"Unable to delete object {object_id!r}: {exc}") from exc

    def object_url(self, bucket: str, object_id: str) -> str:
        return self._settings.object_view_url(bucket, object_id)
