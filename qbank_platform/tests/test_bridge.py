"""Tests for the token-gated external bridge."""

from __future__ import annotations

import dataclasses

import pytest

from qbank_app.services import file_service

TOKEN = "bridge-test-token"


@pytest.fixture()
def seeded(backend):
    first = file_service.create_file(backend, "first.csv").data
    second = file_service.create_file(backend, "second.csv", display_name="Second set").data
    backend.documents.update_document(
        backend.files_collection, first["$id"], {"uploadedAt": "2024-01-01T00:00:00.000Z"}
    )
    backend.documents.update_document(
        backend.files_collection, second["$id"], {"uploadedAt": "2024-02-01T00:00:00.000Z"}
    )
    later = backend.documents.create_document(
        backend.questions_collection,
        {"fileId": first["$id"], "questionText": "Later", "orderIndex": 4},
    )
    question = backend.documents.create_document(
        backend.questions_collection,
        {
            "fileId": first["$id"],
            "questionText": "<p>Q</p>",
            "option1": "a",
            "option2": "b",
            "answer": "2",
            "explanation": "because",
            "orderIndex": 3,
            "questionImageId": "img123",
            "section": "p",
            "type": 1,
        },
    )
    other = backend.documents.create_document(
        backend.questions_collection,
        {"fileId": second["$id"], "questionText": "Other", "orderIndex": 0},
    )
    return {"first": first, "second": second, "question": question, "later": later, "other": other}


def _forbid_backend_calls(backend, monkeypatch):
    def explode(*args, **kwargs):
        raise AssertionError("backend must not be called")

    for name in ("list_documents", "get_document", "update_document", "create_document"):
        monkeypatch.setattr(backend.documents, name, explode)


@pytest.mark.parametrize(
    "method, query",
    [
        ("get", "route=files"),
        ("get", "route=questions"),
        ("get", "route=question&id=x"),
        ("get", ""),
        ("post", "route=update-question"),
        ("post", "route=files"),
    ],
)
@pytest.mark.parametrize("token", [None, "", "wrong-token"])
def test_token_gate_runs_before_backend(client, backend, monkeypatch, method, query, token):
    _forbid_backend_calls(backend, monkeypatch)
    params = query if token is None else f"token={token}&{query}"
    resp = getattr(client, method)(f"/api/bridge?{params}", json={"id": "x"} if method == "post" else None)
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid or missing API Token"}


def test_unset_token_rejects_everything(client, backend):
    backend.settings = dataclasses.replace(backend.settings, bridge_token="")
    resp = client.get("/api/bridge?token=&route=files")
    assert resp.status_code == 401


def test_files_route(client, seeded):
    resp = client.get(f"/api/bridge?token={TOKEN}&route=files")
    assert resp.status_code == 200
    files = resp.get_json()
    assert [item["id"] for item in files] == [seeded["second"]["$id"], seeded["first"]["$id"]]
    assert files[0] == {
        "id": seeded["second"]["$id"],
        "original_filename": "second.csv",
        "uploaded_at": files[0]["uploaded_at"],
        "total_questions": 0,
        "display_name": "Second set",
    }
    assert files[1]["display_name"] == "first.csv"
    assert files[1]["uploaded_at"].startswith("2024-01-01T00:00:00")


def test_files_route_respects_cap(client, backend, seeded):
    backend.settings = dataclasses.replace(backend.settings, bridge_files_limit=1)
    files = client.get(f"/api/bridge?token={TOKEN}&route=files").get_json()
    assert len(files) == 1


def test_questions_route_translates_fields(client, seeded):
    file_id = seeded["first"]["$id"]
    resp = client.get(f"/api/bridge?token={TOKEN}&route=questions&file_id={file_id}")
    assert resp.status_code == 200
    questions = resp.get_json()
    assert [q["question_text"] for q in questions] == ["<p>Q</p>", "Later"]

    exported = questions[0]
    assert exported["id"] == seeded["question"]["$id"]
    assert exported["file_id"] == file_id
    assert exported["order_index"] == 3
    assert exported["option1"] == "a"
    assert exported["option3"] == ""
    assert exported["answer"] == "2"
    assert exported["type"] == 1
    assert exported["section"] == "p"
    assert exported["question_image"] == "img123"
    assert exported["question_image_url"] == (
        "http://localhost/storage/buckets/question-images/files/img123/view?project=test-project"
    )
    assert exported["explanation_image"] is None
    assert exported["explanation_image_url"] == ""
    assert exported["created_at"] == seeded["question"]["$createdAt"]
    assert "questionText" not in exported


def test_questions_route_without_filter(client, seeded):
    questions = client.get(f"/api/bridge?token={TOKEN}&route=questions").get_json()
    assert len(questions) == 3
    assert questions[0]["question_text"] == "Other"


def test_single_question_route(client, seeded):
    question_id = seeded["question"]["$id"]
    resp = client.get(f"/api/bridge?token={TOKEN}&route=question&id={question_id}")
    assert resp.status_code == 200
    assert resp.get_json()["question_text"] == "<p>Q</p>"

    missing_id = client.get(f"/api/bridge?token={TOKEN}&route=question")
    assert missing_id.status_code == 400
    assert missing_id.get_json() == {"error": "Missing question ID"}

    unknown = client.get(f"/api/bridge?token={TOKEN}&route=question&id=nope")
    assert unknown.status_code == 404
    assert unknown.get_json() == {"error": "Question not found"}


@pytest.mark.parametrize("route", ["", "route=unknown"])
def test_unknown_read_route(client, route):
    resp = client.get(f"/api/bridge?token={TOKEN}&{route}")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Route not found or not specified"}


def test_update_question_changes_only_given_fields(client, backend, seeded):
    question_id = seeded["question"]["$id"]
    before = backend.documents.get_document(backend.questions_collection, question_id)

    resp = client.post(
        f"/api/bridge?token={TOKEN}&route=update-question",
        json={"id": question_id, "question_text": "new", "unknown_field": "ignored"},
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Question updated"}

    after = backend.documents.get_document(backend.questions_collection, question_id)
    assert after["questionText"] == "new"
    for key in ("fileId", "option1", "option2", "answer", "explanation", "type", "section", "orderIndex", "questionImageId"):
        assert after[key] == before[key]


def test_update_question_coerces_type_and_section(client, backend, seeded):
    question_id = seeded["question"]["$id"]
    resp = client.post(
        f"/api/bridge?token={TOKEN}&route=update-question",
        json={"id": question_id, "type": "3", "section": 2, "answer": 4, "option5": None},
    )
    assert resp.status_code == 200
    after = backend.documents.get_document(backend.questions_collection, question_id)
    assert after["type"] == 3
    assert after["section"] == "2"
    assert after["answer"] == "4"
    assert after["option5"] == ""


def test_update_question_rejects_non_numeric_type(client, seeded):
    resp = client.post(
        f"/api/bridge?token={TOKEN}&route=update-question",
        json={"id": seeded["question"]["$id"], "type": "abc"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid field values"
    assert "type" in resp.get_json()["details"]


def test_update_requires_id(client):
    resp = client.post(f"/api/bridge?token={TOKEN}&route=update-question", json={"question_text": "x"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing question ID"}


def test_update_unknown_question(client, seeded):
    resp = client.post(
        f"/api/bridge?token={TOKEN}&route=update-question", json={"id": "nope", "answer": "1"}
    )
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Question not found"}


def test_post_to_read_route_is_rejected(client):
    resp = client.post(f"/api/bridge?token={TOKEN}&route=questions", json={"id": "x"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid route for POST"}
