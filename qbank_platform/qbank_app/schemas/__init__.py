"""Serialization / validation schemas (Marshmallow)."""

from .user_schema import LoginSchema, RegisterSchema, UserSchema
from .question_schema import (
    CSVUploadFormSchema,
    FileCreateSchema,
    FileDocumentSchema,
    FileFiltersSchema,
    FileUpdateSchema,
    QuestionDocumentSchema,
    QuestionFieldsSchema,
    QuestionFiltersSchema,
    QuestionInputSchema,
    ReorderSchema,
)
from .bridge_schema import BridgeFileSchema, BridgeQuestionSchema, BridgeQuestionUpdateSchema

__all__ = [
    "BridgeFileSchema",
    "BridgeQuestionSchema",
    "BridgeQuestionUpdateSchema",
    "CSVUploadFormSchema",
    "FileCreateSchema",
    "FileDocumentSchema",
    "FileFiltersSchema",
    "FileUpdateSchema",
    "LoginSchema",
    "QuestionDocumentSchema",
    "QuestionFieldsSchema",
    "QuestionFiltersSchema",
    "QuestionInputSchema",
    "RegisterSchema",
    "ReorderSchema",
    "UserSchema",
]
