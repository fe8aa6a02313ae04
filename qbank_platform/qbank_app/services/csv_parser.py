"""CSV parsing and normalization for question uploads.

The parser is pure: the same text and flag always yield the same rows.
"""

from __future__ import annotations

import csv
import io
import re
from typing import Iterator, Mapping

from ..records import DEFAULT_SECTION, LEGACY_SECTION_CODES, OPTION_FIELDS, ParsedQuestionRow

QUESTION_COLUMNS = ("questions", "question")
_ZERO_INDEXED_ANSWER = re.compile(r"[0-4]")
_LEADING_INTEGER = re.compile(r"\s*([+-]?[0-9]+)")


class CSVParseError(ValueError):
    """The upload is not structurally valid CSV."""

    def __init__(self, message: str, line: int | None = None):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
        self.line = line


def decode_csv(data: bytes) -> str:
    """Decode uploaded bytes as UTF-8, dropping a leading BOM."""

    return data.decode("utf-8-sig", errors="replace")


def normalize_header(name: str) -> str:
    return name.lower().strip()


def parse_type(value: str | None) -> int:
    """Leading integer of ``value``; 0 when there is none."""

    match = _LEADING_INTEGER.match(value or "")
    if not match:
        return 0
    return int(match.group(1))


def normalize_answer(value: str | None, convert_zero_indexed: bool) -> str:
    answer = (value or "").strip()
    if convert_zero_indexed and _ZERO_INDEXED_ANSWER.fullmatch(answer):
        answer = str(int(answer) + 1)
    return answer


def normalize_section(value: str | None) -> str:
    section = (value or "").strip() or DEFAULT_SECTION
    return LEGACY_SECTION_CODES.get(section, section)


def normalize_row(
    values: Mapping[str, str], convert_zero_indexed: bool = False
) -> ParsedQuestionRow | None:
    """Build a question from one header-keyed row, or None when it has no text."""

    question_text = ""
    for column in QUESTION_COLUMNS:
        if values.get(column):
            question_text = values[column]
            break
    if not question_text.strip():
        return None

    options = {name: (values.get(name) or "").strip() for name in OPTION_FIELDS}
    return ParsedQuestionRow(
        question_text=question_text,
        answer=normalize_answer(values.get("answer"), convert_zero_indexed),
        explanation=(values.get("explanation") or "").strip(),
        type=parse_type(values.get("type")),
        section=normalize_section(values.get("section")),
        **options,
    )


def iter_records(text: str) -> Iterator[dict[str, str]]:
    """Yield header-keyed rows; the first non-empty row is the header."""

    if text.startswith("\ufeff"):
        text = text[1:]
    # Rich-text cells with inline data: images exceed the default 128 KiB field limit;
    # no cell can be longer than the whole upload.
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    columns: dict[str, int] | None = None
    try:
        for cells in reader:
            if not cells:
                continue
            if columns is None:
                columns = {}
                for position, name in enumerate(cells):
                    columns.setdefault(normalize_header(name), position)
                continue
            yield {
                name: cells[position] if position < len(cells) else ""
                for name, position in columns.items()
            }
    except csv.Error as exc:
        raise CSVParseError(f"Malformed CSV: {exc}", reader.line_num) from exc


def parse_csv(text: str, convert_zero_indexed: bool = False) -> list[ParsedQuestionRow]:
    """Parse CSV text into normalized rows, preserving input order."""

    rows: list[ParsedQuestionRow] = []
    for values in iter_records(text):
        row = normalize_row(values, convert_zero_indexed)
        if row is not None:
            rows.append(row)
    return rows
