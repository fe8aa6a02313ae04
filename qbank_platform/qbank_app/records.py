"""Typed question bank records used by the services."""

from __future__ import annotations

from dataclasses import dataclass

SECTION_LABELS: dict[str, str] = {
    "0": "None",
    "p": "Physics",
    "c": "Chemistry",
    "m": "Math",
    "b": "Biology",
    "bm": "Bio + Math",
    "bn": "Bio + Non-Bio",
    "e": "English",
    "i": "ICT",
    "gk": "General Knowledge",
    "iq": "IQ Test",
}
SECTION_CODES = tuple(SECTION_LABELS)
DEFAULT_SECTION = "0"

# Legacy numeric subject codes found in older CSV exports.
LEGACY_SECTION_CODES: dict[str, str] = {"1": "p", "2": "c", "3": "m", "4": "b"}

OPTION_FIELDS = ("option1", "option2", "option3", "option4", "option5")


@dataclass(frozen=True)
class ParsedQuestionRow:
    question_text: str
    option1: str = ""
    option2: str = ""
    option3: str = ""
    option4: str = ""
    option5: str = ""
    answer: str = ""
    explanation: str = ""
    type: int = 0
    section: str = DEFAULT_SECTION


@dataclass
class QuestionRecord:
    id: str
    file_id: str
    question_text: str
    option1: str = ""
    option2: str = ""
    option3: str = ""
    option4: str = ""
    option5: str = ""
    answer: str = ""
    explanation: str = ""
    question_image_id: str | None = None
    explanation_image_id: str | None = None
    type: int = 0
    section: str = DEFAULT_SECTION
    order_index: int = 0
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def image_ids(self) -> list[str]:
        return [image for image in (self.question_image_id, self.explanation_image_id) if image]


@dataclass
class FileRecord:
    id: str
    original_filename: str
    display_name: str | None = None
    storage_file_id: str | None = None
    total_questions: int = 0
    uploaded_by: str | None = None
    uploaded_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.original_filename
