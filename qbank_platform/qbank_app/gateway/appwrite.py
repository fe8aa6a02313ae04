"""REST gateway for the hosted Appwrite backend."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from ..settings import BackendSettings
from .base import (
    DocumentList,
    DocumentNotFound,
    DocumentStore,
    GatewayError,
    ObjectNotFound,
    ObjectStore,
    Query,
    StoredObject,
    new_document_id,
)

logger = logging.getLogger(__name__)


class AppwriteRequestError(GatewayError):
    def __init__(self, message: str, status: int, error_type: str | None = None):
        super().__init__(message)
        self.status = status
        self.error_type = error_type


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _encode_query(query: Query) -> list[str]:
    queries: list[dict[str, Any]] = []
    for attribute, value in query.equal.items():
        values = list(value) if isinstance(value, (list, tuple, set)) else [value]
        queries.append({"method": "equal", "attribute": attribute, "values": values})
    if query.search:
        attribute, term = query.search
        queries.append({"method": "search", "attribute": attribute, "values": [term]})
    if query.order_by:
        method = "orderDesc" if query.descending else "orderAsc"
        queries.append({"method": method, "attribute": query.order_by})
    queries.append({"method": "limit", "values": [query.limit]})
    if query.offset:
        queries.append({"method": "offset", "values": [query.offset]})
    return [json.dumps(item, separators=(",", ":")) for item in queries]


@dataclass
class AppwriteClient:
    settings: BackendSettings
    session: requests.Session = field(default_factory=requests.Session)

    def _headers(self) -> dict[str, str]:
        return {
            "X-Appwrite-Project": self.settings.project_id,
            "X-Appwrite-Key": self.settings.api_key,
        }

    def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        raw: bool = False,
        not_found: GatewayError | None = None,
    ) -> Any:
        url = f"{self.settings.endpoint}{path}"
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.request(
                    method,
                    url,
                    headers=self._headers(),
                    params=params,
                    json=json_body,
                    data=data,
                    files=files,
                    timeout=(self.settings.connect_timeout, self.settings.read_timeout),
                )
                break
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt >= self.settings.max_retries:
                    raise GatewayError(f"Backend unreachable: {exc}") from exc
                delay = self.settings.retry_backoff * attempt
                logger.warning(
                    "Backend call %s %s failed (attempt %s/%s): %s. Retrying in %.1fs",
                    method,
                    path,
                    attempt,
                    self.settings.max_retries,
                    exc,
                    delay,
                )
                time.sleep(delay)

        if response.status_code == 404 and not_found is not None:
            raise not_found
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            raise AppwriteRequestError(
                payload.get("message") or f"Backend returned HTTP {response.status_code}",
                response.status_code,
                payload.get("type"),
            )
        if raw:
            return response.content
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()


class AppwriteDocumentStore(DocumentStore):
    def __init__(self, client: AppwriteClient):
        self.client = client
        self._database = client.settings.database_id

    def _collection_path(self, collection: str) -> str:
        return (
            f"/databases/{_segment(self._database)}/collections/"
            f"{_segment(collection)}/documents"
        )

    def _document_path(self, collection: str, document_id: str) -> str:
        return f"{self._collection_path(collection)}/{_segment(document_id)}"

    def list_documents(self, collection: str, query: Query | None = None) -> DocumentList:
        payload = self.client.call(
            "GET",
            self._collection_path(collection),
            params={"queries[]": _encode_query(query or Query())},
        )
        return DocumentList(
            total=int(payload.get("total", 0)),
            documents=list(payload.get("documents", [])),
        )

    def get_document(self, collection: str, document_id: str) -> dict[str, Any]:
        return self.client.call(
            "GET",
            self._document_path(collection, document_id),
            not_found=DocumentNotFound(collection, document_id),
        )

    def create_document(
        self, collection: str, data: dict[str, Any], document_id: str | None = None
    ) -> dict[str, Any]:
        return self.client.call(
            "POST",
            self._collection_path(collection),
            json_body={"documentId": document_id or new_document_id(), "data": data},
        )

    def update_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        return self.client.call(
            "PATCH",
            self._document_path(collection, document_id),
            json_body={"data": data},
            not_found=DocumentNotFound(collection, document_id),
        )

    def delete_document(self, collection: str, document_id: str) -> None:
        self.client.call(
            "DELETE",
            self._document_path(collection, document_id),
            not_found=DocumentNotFound(collection, document_id),
        )

    def increment(
        self,
        collection: str,
        document_id: str,
        attribute: str,
        delta: int,
        *,
        minimum: int | None = None,
    ) -> dict[str, Any]:
        base = f"{self._document_path(collection, document_id)}/{_segment(attribute)}"
        if delta >= 0:
            return self.client.call(
                "PATCH",
                f"{base}/increment",
                json_body={"value": delta},
                not_found=DocumentNotFound(collection, document_id),
            )
        body: dict[str, Any] = {"value": -delta}
        if minimum is not None:
            body["min"] = minimum
        return self.client.call(
            "PATCH",
            f"{base}/decrement",
            json_body=body,
            not_found=DocumentNotFound(collection, document_id),
        )


class AppwriteObjectStore(ObjectStore):
    def __init__(self, client: AppwriteClient):
        self.client = client

    def _file_path(self, bucket: str, object_id: str) -> str:
        return f"/storage/buckets/{_segment(bucket)}/files/{_segment(object_id)}"

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
        content_type = content_type or "application/octet-stream"
        payload = self.client.call(
            "POST",
            f"/storage/buckets/{_segment(bucket)}/files",
            data={"fileId": object_id},
            files={"file": (filename, data, content_type)},
        )
        return StoredObject(
            id=payload.get("$id", object_id),
            bucket=bucket,
            filename=payload.get("name", filename),
            size=int(payload.get("sizeOriginal", len(data))),
            content_type=payload.get("mimeType", content_type),
        )

    def read_object(self, bucket: str, object_id: str) -> tuple[bytes, StoredObject]:
        missing = ObjectNotFound(bucket, object_id)
        meta = self.client.call("GET", self._file_path(bucket, object_id), not_found=missing)
        data = self.client.call(
            "GET",
            f"{self._file_path(bucket, object_id)}/download",
            raw=True,
            not_found=missing,
        )
        return data, StoredObject(
            id=object_id,
            bucket=bucket,
            filename=meta.get("name", object_id),
            size=len(data),
            content_type=meta.get("mimeType", "application/octet-stream"),
        )

    def delete_object(self, bucket: str, object_id: str) -> None:
        self.client.call(
            "DELETE",
            self._file_path(bucket, object_id),
            not_found=ObjectNotFound(bucket, object_id),
        )

    def object_url(self, bucket: str, object_id: str) -> str:
        return self.client.settings.object_view_url(bucket, object_id)
