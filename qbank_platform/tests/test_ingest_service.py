"""Tests for CSV create/merge ingestion."""

from __future__ import annotations

import pytest

from qbank_app.gateway import GatewayError, Query
from qbank_app.services import file_service, ingest_service
from qbank_app.services.ingest_service import CSVUpload

FIVE_ROWS = (
    "Question,Option1,Option2,Answer,Section,Type\n"
    "Q1,a,b,0,1,2\n"
    "Q2,a,b,1,2,0\n"
    "Q3,a,b,2,3,1\n"
    "Q4,a,b,3,4,0\n"
    "Q5,a,b,4,e,0\n"
)


def _upload(text: str, filename: str = "bank.csv") -> CSVUpload:
    return CSVUpload(filename=filename, content=text.encode("utf-8"), content_type="text/csv")


def _questions(backend, file_id):
    listing = backend.documents.list_documents(
        backend.questions_collection,
        Query(equal={"fileId": file_id}, order_by="orderIndex", limit=100),
    )
    return listing.documents


def _file(backend, file_id):
    return backend.documents.get_document(backend.files_collection, file_id)


def _file_count(backend):
    return backend.documents.list_documents(backend.files_collection).total


def test_create_from_csv_persists_rows_in_order(backend):
    result = ingest_service.create_from_csv(
        backend, _upload(FIVE_ROWS), display_name="Physics set", convert_zero_indexed=True, uploaded_by="7"
    )
    assert result.success is True
    assert result.status == 201
    file_id = result.data["fileId"]
    assert result.data["questionCount"] == 5

    file_doc = _file(backend, file_id)
    assert file_doc["totalQuestions"] == 5
    assert file_doc["displayName"] == "Physics set"
    assert file_doc["originalFilename"] == "bank.csv"
    assert file_doc["uploadedBy"] == "7"
    assert file_doc["uploadedAt"]

    questions = _questions(backend, file_id)
    assert [q["orderIndex"] for q in questions] == [0, 1, 2, 3, 4]
    assert [q["questionText"] for q in questions] == ["Q1", "Q2", "Q3", "Q4", "Q5"]
    assert [q["answer"] for q in questions] == ["1", "2", "3", "4", "5"]
    assert [q["section"] for q in questions] == ["p", "c", "m", "b", "e"]
    assert questions[0]["type"] == 2


def test_create_from_csv_keeps_a_copy_of_the_upload(backend):
    result = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS))
    file_doc = _file(backend, result.data["fileId"])
    assert file_doc["storageFileId"]
    assert file_doc["displayName"] == "bank.csv"
    data, stored = backend.objects.read_object(backend.sources_bucket, file_doc["storageFileId"])
    assert data == FIVE_ROWS.encode("utf-8")
    assert stored.filename == "bank.csv"


def test_source_upload_failure_does_not_fail_ingestion(backend, monkeypatch):
    def broken_put(*args, **kwargs):
        raise GatewayError("bucket offline")

    monkeypatch.setattr(backend.objects, "put_object", broken_put)
    result = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS))
    assert result.success is True
    assert _file(backend, result.data["fileId"])["storageFileId"] is None
    assert len(_questions(backend, result.data["fileId"])) == 5


@pytest.mark.parametrize(
    "upload, message",
    [
        (None, "No file provided"),
        (CSVUpload(filename="", content=b""), "No file provided"),
        (CSVUpload(filename="bank.xlsx", content=b"question\nQ\n"), "Only CSV files are allowed"),
    ],
)
def test_create_rejects_bad_uploads_without_writing(backend, upload, message):
    result = ingest_service.create_from_csv(backend, upload)
    assert result.success is False
    assert result.status == 400
    assert result.error == message
    assert _file_count(backend) == 0


def test_uppercase_extension_is_accepted(backend):
    result = ingest_service.create_from_csv(backend, _upload("question\nQ\n", filename="BANK.CSV"))
    assert result.success is True


@pytest.mark.parametrize("text", ["question,answer\n", "question,answer\n  ,1\n,2\n", ""])
def test_empty_parse_creates_no_file(backend, text):
    result = ingest_service.create_from_csv(backend, _upload(text))
    assert result.success is False
    assert result.error == "No valid questions found in CSV"
    assert _file_count(backend) == 0


def test_malformed_csv_is_rejected(backend):
    result = ingest_service.create_from_csv(backend, _upload('question\n"bad"row\n'))
    assert result.success is False
    assert result.status == 400
    assert "Malformed CSV" in result.error
    assert _file_count(backend) == 0


def test_merge_appends_after_existing_questions(backend):
    created = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS))
    file_id = created.data["fileId"]
    original = {q["$id"]: q["orderIndex"] for q in _questions(backend, file_id)}

    merged = ingest_service.merge_into_collection(
        backend, file_id, _upload("question,answer\nM1,0\nM2,1\nM3,2\n"), convert_zero_indexed=True
    )
    assert merged.success is True
    assert merged.data == {"fileId": file_id, "questionCount": 3}

    questions = _questions(backend, file_id)
    assert [q["orderIndex"] for q in questions] == [0, 1, 2, 3, 4, 5, 6, 7]
    assert [q["questionText"] for q in questions[5:]] == ["M1", "M2", "M3"]
    assert [q["answer"] for q in questions[5:]] == ["1", "2", "3"]
    assert {q["$id"]: q["orderIndex"] for q in questions[:5]} == original
    assert _file(backend, file_id)["totalQuestions"] == 8


def test_merge_into_empty_file_starts_at_zero(backend):
    record = file_service.create_file(backend, "manual.csv").data
    merged = ingest_service.merge_into_collection(backend, record["$id"], _upload("question\nA\nB\n"))
    assert merged.success is True
    assert [q["orderIndex"] for q in _questions(backend, record["$id"])] == [0, 1]
    assert _file(backend, record["$id"])["totalQuestions"] == 2


def test_merge_into_missing_file_is_not_found(backend):
    result = ingest_service.merge_into_collection(backend, "missing", _upload("question\nA\n"))
    assert result.success is False
    assert result.status == 404
    assert result.error == "File not found"


def test_merge_with_empty_parse_leaves_file_untouched(backend):
    file_id = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS)).data["fileId"]
    result = ingest_service.merge_into_collection(backend, file_id, _upload("question\n \n"))
    assert result.success is False
    assert result.error == "No valid questions found in CSV"
    assert len(_questions(backend, file_id)) == 5
    assert _file(backend, file_id)["totalQuestions"] == 5


def _fail_question_creates_after(backend, monkeypatch, allowed: int):
    original_create = backend.documents.create_document
    calls = {"questions": 0}

    def flaky_create(collection, data, document_id=None):
        if collection == backend.questions_collection:
            calls["questions"] += 1
            if calls["questions"] > allowed:
                raise GatewayError("write timed out")
        return original_create(collection, data, document_id)

    monkeypatch.setattr(backend.documents, "create_document", flaky_create)


def test_partial_create_corrects_counter(backend, monkeypatch):
    _fail_question_creates_after(backend, monkeypatch, allowed=2)
    result = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS))
    assert result.success is False
    assert result.status == 502
    assert result.error == "Stored 2 of 5 questions before the storage backend failed"
    file_id = result.data["fileId"]
    assert result.data["questionCount"] == 2
    assert len(_questions(backend, file_id)) == 2
    assert _file(backend, file_id)["totalQuestions"] == 2


def test_partial_merge_counts_only_stored_rows(backend, monkeypatch):
    file_id = ingest_service.create_from_csv(backend, _upload(FIVE_ROWS)).data["fileId"]
    _fail_question_creates_after(backend, monkeypatch, allowed=1)
    result = ingest_service.merge_into_collection(backend, file_id, _upload("question\nA\nB\nC\n"))
    assert result.success is False
    assert result.data == {"fileId": file_id, "questionCount": 1}
    assert _file(backend, file_id)["totalQuestions"] == 6
    assert [q["orderIndex"] for q in _questions(backend, file_id)] == [0, 1, 2, 3, 4, 5]
