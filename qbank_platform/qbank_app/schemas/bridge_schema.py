"""Schemas for the external bridge (snake_case field naming)."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load


class CoercedString(fields.Field):
    """Accepts any JSON scalar and stores its string form."""

    default_error_messages = {"invalid": "Not a valid string."}

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (str, int, float)):
            return str(value)
        raise self.make_error("invalid")


class CoercedInteger(fields.Field):
    """Accepts numbers, numeric strings and booleans as an integer."""

    default_error_messages = {"invalid": "Not a valid number."}

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return 0
            try:
                value = float(text)
            except ValueError as exc:
                raise self.make_error("invalid") from exc
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise self.make_error("invalid")


class BridgeFileSchema(Schema):
    id = fields.String()
    original_filename = fields.String()
    uploaded_at = fields.String()
    total_questions = fields.Integer()
    display_name = fields.String(attribute="label")


class BridgeQuestionSchema(Schema):
    id = fields.String()
    file_id = fields.String()
    question_text = fields.String()
    option1 = fields.String()
    option2 = fields.String()
    option3 = fields.String()
    option4 = fields.String()
    option5 = fields.String()
    answer = fields.String()
    explanation = fields.String()
    question_image = fields.String(attribute="question_image_id")
    explanation_image = fields.String(attribute="explanation_image_id")
    type = fields.Integer()
    section = fields.String()
    order_index = fields.Integer()
    created_at = fields.String()


class BridgeQuestionUpdateSchema(Schema):
    """Partial update payload; unknown fields (including ``id``) are ignored."""

    class Meta:
        unknown = EXCLUDE

    question_text = CoercedString(allow_none=True)
    option1 = CoercedString(allow_none=True)
    option2 = CoercedString(allow_none=True)
    option3 = CoercedString(allow_none=True)
    option4 = CoercedString(allow_none=True)
    option5 = CoercedString(allow_none=True)
    answer = CoercedString(allow_none=True)
    explanation = CoercedString(allow_none=True)
    type = CoercedInteger(allow_none=True)
    section = CoercedString(allow_none=True)

    @post_load
    def fill_nulls(self, data, **kwargs):
        for key, value in data.items():
            if value is None:
                data[key] = {"type": 0, "section": "0"}.get(key, "")
        return data
