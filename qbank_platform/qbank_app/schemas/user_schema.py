"""Schemas for user-related payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class RegisterSchema(Schema):
    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=3, max=64),
            validate.Regexp(USERNAME_PATTERN, error="Only letters, digits, '.', '_' and '-'."),
        ],
    )
    name = fields.String(required=True, validate=validate.Length(min=2, max=128))
    password = fields.String(required=True, validate=validate.Length(min=8))
    confirm_password = fields.String(required=True)

    class Meta:
        unknown = EXCLUDE

    @validates_schema
    def passwords_match(self, data, **kwargs):
        if data.get("password") != data.get("confirm_password"):
            raise ValidationError("Passwords don't match", field_name="confirm_password")


class LoginSchema(Schema):
    username = fields.String(required=True)
    password = fields.String(required=True)


class UserSchema(Schema):
    id = fields.Integer(dump_only=True)
    username = fields.String(dump_only=True)
    name = fields.String(dump_only=True)
    role = fields.String(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
