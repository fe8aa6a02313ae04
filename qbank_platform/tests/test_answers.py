"""Tests for answer/section display helpers."""

from __future__ import annotations

import pytest

from qbank_app.utils import answer_notations, answer_to_letter, letter_to_answer, section_label


@pytest.mark.parametrize("answer, letter", [("1", "A"), ("3", "C"), ("5", "E"), ("6", "6"), ("B", "B"), ("", "")])
def test_answer_to_letter(answer, letter):
    assert answer_to_letter(answer) == letter


@pytest.mark.parametrize("letter, answer", [("A", "1"), ("c", "3"), ("E", "5"), ("F", "F"), ("2", "2")])
def test_letter_to_answer(letter, answer):
    assert letter_to_answer(letter) == answer


def test_section_label():
    assert section_label("bm") == "Bio + Math"
    assert section_label("0") == "None"
    assert section_label(None) == "None"
    assert section_label("zz") == "zz"


@pytest.mark.parametrize(
    "answer, expected",
    [("2", ["2", "B"]), ("b", ["2", "B"]), (" E ", ["5", "E"]), ("7", ["7"]), ("x", ["x"])],
)
def test_answer_notations(answer, expected):
    assert answer_notations(answer) == expected
