"""Schemas translating backend documents into records and validating payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from ..records import SECTION_CODES, FileRecord, QuestionRecord
from ..utils.answers import answer_to_letter, section_label as label_for_section

_TEXT_ATTRIBUTES = (
    "question_text",
    "option1",
    "option2",
    "option3",
    "option4",
    "option5",
    "answer",
    "explanation",
)


class QuestionFieldsSchema(Schema):
    """Writable question attributes, keyed by their document names."""

    class Meta:
        unknown = EXCLUDE

    file_id = fields.String(data_key="fileId")
    question_text = fields.String(data_key="questionText", validate=validate.Length(min=1))
    option1 = fields.String(load_default="")
    option2 = fields.String(load_default="")
    option3 = fields.String(load_default="")
    option4 = fields.String(load_default="")
    option5 = fields.String(load_default="")
    answer = fields.String(load_default="")
    explanation = fields.String(load_default="")
    question_image_id = fields.String(data_key="questionImageId", allow_none=True)
    explanation_image_id = fields.String(data_key="explanationImageId", allow_none=True)
    type = fields.Integer(load_default=0)
    section = fields.String(load_default="0", validate=validate.OneOf(SECTION_CODES))
    order_index = fields.Integer(data_key="orderIndex", validate=validate.Range(min=0))


class QuestionInputSchema(QuestionFieldsSchema):
    """Payload accepted from the manual question editor."""

    question_text = fields.String(
        data_key="questionText", required=True, validate=validate.Length(min=1)
    )


class QuestionDocumentSchema(Schema):
    """Loads a generic question document into a `QuestionRecord`."""

    class Meta:
        unknown = EXCLUDE

    id = fields.String(data_key="$id", required=True)
    created_at = fields.String(data_key="$createdAt", allow_none=True, load_default=None)
    updated_at = fields.String(data_key="$updatedAt", allow_none=True, load_default=None)
    file_id = fields.String(data_key="fileId", required=True)
    question_text = fields.String(data_key="questionText", allow_none=True, load_default="")
    option1 = fields.String(allow_none=True, load_default="")
    option2 = fields.String(allow_none=True, load_default="")
    option3 = fields.String(allow_none=True, load_default="")
    option4 = fields.String(allow_none=True, load_default="")
    option5 = fields.String(allow_none=True, load_default="")
    answer = fields.String(allow_none=True, load_default="")
    explanation = fields.String(allow_none=True, load_default="")
    question_image_id = fields.String(
        data_key="questionImageId", allow_none=True, load_default=None
    )
    explanation_image_id = fields.String(
        data_key="explanationImageId", allow_none=True, load_default=None
    )
    type = fields.Integer(allow_none=True, load_default=0)
    section = fields.String(allow_none=True, load_default="0")
    order_index = fields.Integer(data_key="orderIndex", allow_none=True, load_default=0)
    answer_letter = fields.Function(
        lambda record: answer_to_letter(record.answer), data_key="answerLetter", dump_only=True
    )
    section_label = fields.Function(
        lambda record: label_for_section(record.section), data_key="sectionLabel", dump_only=True
    )

    @post_load
    def make_record(self, data, **kwargs) -> QuestionRecord:
        for key in _TEXT_ATTRIBUTES:
            data[key] = data.get(key) or ""
        data["question_image_id"] = data.get("question_image_id") or None
        data["explanation_image_id"] = data.get("explanation_image_id") or None
        data["type"] = data.get("type") or 0
        data["section"] = data.get("section") or "0"
        data["order_index"] = data.get("order_index") or 0
        return QuestionRecord(**data)


class FileFieldsSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    original_filename = fields.String(data_key="originalFilename")
    display_name = fields.String(data_key="displayName", allow_none=True)
    storage_file_id = fields.String(data_key="storageFileId", allow_none=True)
    total_questions = fields.Integer(data_key="totalQuestions", validate=validate.Range(min=0))
    uploaded_by = fields.String(data_key="uploadedBy", allow_none=True)
    uploaded_at = fields.String(data_key="uploadedAt", allow_none=True)


class FileDocumentSchema(Schema):
    """Loads a generic file document into a `FileRecord`."""

    class Meta:
        unknown = EXCLUDE

    id = fields.String(data_key="$id", required=True)
    created_at = fields.String(data_key="$createdAt", allow_none=True, load_default=None)
    updated_at = fields.String(data_key="$updatedAt", allow_none=True, load_default=None)
    original_filename = fields.String(data_key="originalFilename", required=True)
    display_name = fields.String(data_key="displayName", allow_none=True, load_default=None)
    storage_file_id = fields.String(
        data_key="storageFileId", allow_none=True, load_default=None
    )
    total_questions = fields.Integer(
        data_key="totalQuestions", allow_none=True, load_default=0
    )
    uploaded_by = fields.String(data_key="uploadedBy", allow_none=True, load_default=None)
    uploaded_at = fields.String(data_key="uploadedAt", allow_none=True, load_default=None)

    @post_load
    def make_record(self, data, **kwargs) -> FileRecord:
        data["total_questions"] = data.get("total_questions") or 0
        return FileRecord(**data)


class FileCreateSchema(Schema):
    original_filename = fields.String(
        data_key="originalFilename", required=True, validate=validate.Length(min=1, max=255)
    )
    display_name = fields.String(
        data_key="displayName", load_default="", validate=validate.Length(max=255)
    )


class FileUpdateSchema(Schema):
    display_name = fields.String(
        data_key="displayName", validate=validate.Length(min=1, max=255)
    )
    total_questions = fields.Integer(data_key="totalQuestions", validate=validate.Range(min=0))


class CSVUploadFormSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    display_name = fields.String(data_key="displayName", load_default="")
    convert_zero_indexed = fields.Boolean(data_key="convertZeroIndexed", load_default=False)


class ReorderSchema(Schema):
    question_ids = fields.List(
        fields.String(), data_key="questionIds", required=True, validate=validate.Length(min=1)
    )


class FileFiltersSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default="")
    sort_by = fields.String(
        data_key="sortBy",
        load_default="uploaded",
        validate=validate.OneOf(("name", "uploaded", "questions")),
    )
    sort_order = fields.String(
        data_key="sortOrder", load_default="desc", validate=validate.OneOf(("asc", "desc"))
    )
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(
        data_key="pageSize", load_default=25, validate=validate.Range(min=1, max=100)
    )


class QuestionFiltersSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    file_id = fields.String(data_key="fileId", load_default=None)
    section = fields.String(load_default=None)
    type = fields.Integer(load_default=None)
    answer = fields.String(load_default=None)
    search = fields.String(load_default="")
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(
        data_key="pageSize", load_default=25, validate=validate.Range(min=1, max=100)
    )
