"""Utility helpers (security, answer/section display)."""

from .answers import answer_notations, answer_to_letter, letter_to_answer, section_label
from .security import (
    ADMIN_ROLE,
    READER_ROLE,
    generate_access_token,
    hash_password,
    is_admin,
    verify_password,
)

__all__ = [
    "ADMIN_ROLE",
    "READER_ROLE",
    "answer_notations",
    "answer_to_letter",
    "generate_access_token",
    "hash_password",
    "is_admin",
    "letter_to_answer",
    "section_label",
    "verify_password",
]
