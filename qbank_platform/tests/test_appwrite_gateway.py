"""Tests for the Appwrite REST gateway using a recorded fake session."""

from __future__ import annotations

import json

import pytest
import requests

from qbank_app.gateway import DocumentNotFound, GatewayError, ObjectNotFound, Query
from qbank_app.gateway import appwrite
from qbank_app.gateway.appwrite import (
    AppwriteClient,
    AppwriteDocumentStore,
    AppwriteObjectStore,
    AppwriteRequestError,
)
from qbank_app.settings import BackendSettings


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=None):
        self.status_code = status_code
        self._payload = payload
        if content is None:
            content = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _settings(**overrides):
    values = dict(
        backend="appwrite",
        endpoint="https://cloud.example.com/v1",
        project_id="proj",
        api_key="secret-key",
        database_id="db1",
        files_collection_id="files",
        questions_collection_id="questions",
        question_images_bucket_id="images",
        source_files_bucket_id="sources",
        bridge_token="token",
        retry_backoff=0.01,
    )
    values.update(overrides)
    return BackendSettings(**values)


def _stores(*responses, **overrides):
    session = FakeSession(*responses)
    client = AppwriteClient(_settings(**overrides), session=session)
    return session, AppwriteDocumentStore(client), AppwriteObjectStore(client)


def test_list_documents_encodes_queries():
    session, documents, _ = _stores(
        FakeResponse(payload={"total": 7, "documents": [{"$id": "q1"}]})
    )
    result = documents.list_documents(
        "questions",
        Query(equal={"fileId": "f1"}, order_by="orderIndex", descending=True, limit=1),
    )

    assert result.total == 7
    assert result.documents == [{"$id": "q1"}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://cloud.example.com/v1/databases/db1/collections/questions/documents"
    assert call["headers"] == {"X-Appwrite-Project": "proj", "X-Appwrite-Key": "secret-key"}
    queries = [json.loads(item) for item in call["params"]["queries[]"]]
    assert queries == [
        {"method": "equal", "attribute": "fileId", "values": ["f1"]},
        {"method": "orderDesc", "attribute": "orderIndex"},
        {"method": "limit", "values": [1]},
    ]


def test_search_and_offset_are_encoded():
    session, documents, _ = _stores(FakeResponse(payload={"total": 0, "documents": []}))
    documents.list_documents("files", Query(search=("displayName", "math"), limit=10, offset=20))
    queries = [json.loads(item) for item in session.calls[0]["params"]["queries[]"]]
    assert {"method": "search", "attribute": "displayName", "values": ["math"]} in queries
    assert {"method": "offset", "values": [20]} in queries


def test_get_missing_document_raises_not_found():
    _, documents, _ = _stores(FakeResponse(404, {"message": "Document not found"}))
    with pytest.raises(DocumentNotFound):
        documents.get_document("questions", "nope")


def test_create_document_sends_id_and_data():
    session, documents, _ = _stores(FakeResponse(201, {"$id": "abc", "questionText": "Q"}))
    created = documents.create_document("questions", {"questionText": "Q"}, document_id="abc")
    assert created["$id"] == "abc"
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["json"] == {"documentId": "abc", "data": {"questionText": "Q"}}


def test_update_document_patches_data():
    session, documents, _ = _stores(FakeResponse(payload={"$id": "abc"}))
    documents.update_document("questions", "abc", {"answer": "2"})
    call = session.calls[0]
    assert call["method"] == "PATCH"
    assert call["url"].endswith("/collections/questions/documents/abc")
    assert call["json"] == {"data": {"answer": "2"}}


def test_delete_document_accepts_empty_body():
    session, documents, _ = _stores(FakeResponse(204, content=b""))
    assert documents.delete_document("files", "f1") is None
    assert session.calls[0]["method"] == "DELETE"


def test_increment_and_decrement_paths():
    session, documents, _ = _stores(
        FakeResponse(payload={"totalQuestions": 5}),
        FakeResponse(payload={"totalQuestions": 0}),
    )
    documents.increment("files", "f1", "totalQuestions", 3)
    documents.increment("files", "f1", "totalQuestions", -2, minimum=0)

    first, second = session.calls
    assert first["url"].endswith("/documents/f1/totalQuestions/increment")
    assert first["json"] == {"value": 3}
    assert second["url"].endswith("/documents/f1/totalQuestions/decrement")
    assert second["json"] == {"value": 2, "min": 0}


def test_error_response_raises_request_error():
    _, documents, _ = _stores(
        FakeResponse(400, {"message": "Invalid document structure", "type": "document_invalid_structure"})
    )
    with pytest.raises(AppwriteRequestError) as excinfo:
        documents.create_document("questions", {"bogus": 1})
    assert excinfo.value.status == 400
    assert excinfo.value.error_type == "document_invalid_structure"
    assert "Invalid document structure" in str(excinfo.value)


def test_error_without_json_body():
    _, documents, _ = _stores(FakeResponse(500, content=b"<html>"))
    with pytest.raises(AppwriteRequestError, match="HTTP 500"):
        documents.list_documents("files")


def test_connection_errors_are_retried(monkeypatch):
    sleeps = []
    monkeypatch.setattr(appwrite.time, "sleep", sleeps.append)
    session, documents, _ = _stores(
        requests.ConnectionError("reset"),
        FakeResponse(payload={"$id": "f1"}),
    )
    assert documents.get_document("files", "f1") == {"$id": "f1"}
    assert len(session.calls) == 2
    assert sleeps == [0.01]


def test_retries_give_up_with_gateway_error(monkeypatch):
    monkeypatch.setattr(appwrite.time, "sleep", lambda _delay: None)
    session, documents, _ = _stores(
        requests.Timeout("slow"),
        requests.Timeout("slow"),
        max_retries=2,
    )
    with pytest.raises(GatewayError, match="unreachable"):
        documents.get_document("files", "f1")
    assert len(session.calls) == 2


def test_put_object_uploads_multipart():
    session, _, objects = _stores(
        FakeResponse(201, {"$id": "img1", "name": "a.png", "sizeOriginal": 3, "mimeType": "image/png"})
    )
    stored = objects.put_object("images", b"abc", filename="a.png", content_type="image/png")
    assert stored.id == "img1"
    assert stored.size == 3
    call = session.calls[0]
    assert call["url"] == "https://cloud.example.com/v1/storage/buckets/images/files"
    assert call["files"] == {"file": ("a.png", b"abc", "image/png")}
    assert "fileId" in call["data"]


def test_read_object_fetches_metadata_and_bytes():
    _, _, objects = _stores(
        FakeResponse(payload={"name": "bank.csv", "mimeType": "text/csv"}),
        FakeResponse(content=b"question\nQ\n"),
    )
    data, meta = objects.read_object("sources", "s1")
    assert data == b"question\nQ\n"
    assert meta.filename == "bank.csv"
    assert meta.content_type == "text/csv"


def test_delete_missing_object():
    _, _, objects = _stores(FakeResponse(404, {"message": "File not found"}))
    with pytest.raises(ObjectNotFound):
        objects.delete_object("images", "gone")


def test_object_url():
    _, _, objects = _stores()
    assert objects.object_url("images", "img 1") == (
        "https://cloud.example.com/v1/storage/buckets/images/files/img%201/view?project=proj"
    )
