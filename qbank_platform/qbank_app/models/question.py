"""Question bank tables backing the SQL document store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..extensions import db
from ..gateway.base import new_document_id


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    dt = value
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class DocumentMixin:
    """Maps document attribute names (camelCase) onto table columns."""

    DOCUMENT_FIELDS: dict[str, str] = {}
    DATETIME_FIELDS: frozenset[str] = frozenset()

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "$id": self.id,
            "$createdAt": _isoformat(self.created_at),
            "$updatedAt": _isoformat(self.updated_at),
        }
        for key, attr in self.DOCUMENT_FIELDS.items():
            value = getattr(self, attr)
            document[key] = _isoformat(value) if attr in self.DATETIME_FIELDS else value
        return document

    def apply_document(self, data: dict[str, Any]) -> None:
        for key, value in data.items():
            if key.startswith("$"):
                continue
            attr = self.DOCUMENT_FIELDS.get(key)
            if attr is None:
                raise ValueError(f"Invalid document structure: Unknown attribute: {key!r}")
            if attr in self.DATETIME_FIELDS:
                value = _parse_datetime(value)
            setattr(self, attr, value)

    @classmethod
    def column_for(cls, key: str):
        attr = cls.DOCUMENT_FIELDS.get(key)
        if attr is None:
            if key == "$createdAt":
                attr = "created_at"
            elif key == "$updatedAt":
                attr = "updated_at"
            elif key == "$id":
                attr = "id"
            else:
                raise ValueError(f"Invalid query: Attribute not found in schema: {key!r}")
        return getattr(cls, attr)


class QuestionFile(DocumentMixin, db.Model):
    """A named collection of questions imported from one or more CSV files."""

    __tablename__ = "question_files"

    DOCUMENT_FIELDS = {
        "originalFilename": "original_filename",
        "displayName": "display_name",
        "storageFileId": "storage_file_id",
        "totalQuestions": "total_questions",
        "uploadedBy": "uploaded_by",
        "uploadedAt": "uploaded_at",
    }
    DATETIME_FIELDS = frozenset({"uploaded_at"})

    id = db.Column(db.String(36), primary_key=True, default=new_document_id)
    original_filename = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(255))
    storage_file_id = db.Column(db.String(36))
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    uploaded_by = db.Column(db.String(64))
    uploaded_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<QuestionFile {self.id} {self.display_name or self.original_filename!r}>"


class Question(DocumentMixin, db.Model):
    __tablename__ = "questions"

    DOCUMENT_FIELDS = {
        "fileId": "file_id",
        "questionText": "question_text",
        "option1": "option1",
        "option2": "option2",
        "option3": "option3",
        "option4": "option4",
        "option5": "option5",
        "answer": "answer",
        "explanation": "explanation",
        "questionImageId": "question_image_id",
        "explanationImageId": "explanation_image_id",
        "type": "type",
        "section": "section",
        "orderIndex": "order_index",
    }

    id = db.Column(db.String(36), primary_key=True, default=new_document_id)
    file_id = db.Column(
        db.String(36),
        db.ForeignKey("question_files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text = db.Column(db.Text, nullable=False)
    option1 = db.Column(db.Text, nullable=False, default="")
    option2 = db.Column(db.Text, nullable=False, default="")
    option3 = db.Column(db.Text, nullable=False, default="")
    option4 = db.Column(db.Text, nullable=False, default="")
    option5 = db.Column(db.Text, nullable=False, default="")
    answer = db.Column(db.String(255), nullable=False, default="")
    explanation = db.Column(db.Text, nullable=False, default="")
    question_image_id = db.Column(db.String(36))
    explanation_image_id = db.Column(db.String(36))
    type = db.Column(db.Integer, nullable=False, default=0)
    section = db.Column(db.String(32), nullable=False, default="0", index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (db.Index("ix_questions_file_order", "file_id", "order_index"),)
