"""Answer and section display helpers."""

from __future__ import annotations

from ..records import SECTION_LABELS

_LETTERS = "ABCDE"


def answer_to_letter(answer: str) -> str:
    """Map a 1-based option number to its letter; anything else is returned as is."""

    value = (answer or "").strip()
    if len(value) == 1 and value in "12345":
        return _LETTERS[int(value) - 1]
    return answer


def letter_to_answer(letter: str) -> str:
    value = (letter or "").strip().upper()
    if len(value) == 1 and value in _LETTERS:
        return str(_LETTERS.index(value) + 1)
    return letter


def section_label(code: str | None) -> str:
    code = code or "0"
    return SECTION_LABELS.get(code, code)


def answer_notations(answer: str) -> list[str]:
    """An answer in both its numeric and letter form, e.g. ``"b"`` -> ``["2", "B"]``."""

    value = answer.strip()
    number = letter_to_answer(value)
    return sorted({number, answer_to_letter(number)})
