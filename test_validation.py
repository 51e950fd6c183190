"""Tests for summary and flashcard validation."""

import pytest

from framez_page_builder.core.exceptions import ValidationError
from framez_page_builder.rendering.sanitizer import HTMLSanitizer
from framez_page_builder.validation import (
    validate_flashcards,
    validate_markdown_summary
)


def test_summary_must_not_be_blank():
    assert validate_markdown_summary("# Notes") == "# Notes"
    for value in ("", "   \n", None, 42):
        with pytest.raises(ValidationError, match="Summary text cannot be empty"):
            validate_markdown_summary(value)


def test_valid_flashcards():
    cards = validate_flashcards([
        {"question": "What is 2+2?", "answer": "4"},
        {"question": "Largest planet?", "answer": "Jupiter", "difficulty": "easy"}
    ])
    assert [c.question for c in cards] == ["What is 2+2?", "Largest planet?"]
    assert [c.answer for c in cards] == ["4", "Jupiter"]
    assert cards[1].extra == {"difficulty": "easy"}


def test_empty_flashcard_list_is_valid():
    assert validate_flashcards([]) == []


def test_flashcards_must_be_a_list():
    with pytest.raises(ValidationError, match="array"):
        validate_flashcards({"question": "Q", "answer": "A"})


@pytest.mark.parametrize("item", [
    "just a string",
    {"question": "Q"},
    {"answer": "A"},
    {"question": "", "answer": "A"},
    {"question": "Q", "answer": "   "},
    {"question": 5, "answer": "A"}
])
def test_invalid_flashcard(item):
    with pytest.raises(ValidationError, match="index 1"):
        validate_flashcards([{"question": "ok", "answer": "ok"}, item])


def test_flashcard_markup_is_removed():
    cards = validate_flashcards([
        {"question": "<b>What</b> is 2+2?", "answer": "<script>alert(1)</script>4"}
    ], HTMLSanitizer())
    assert cards[0].question == "What is 2+2?"
    assert cards[0].answer == "4"


def test_flashcard_entities_are_plain_text():
    cards = validate_flashcards([{"question": "Salt & pepper?", "answer": "a < b"}])
    assert cards[0].question == "Salt & pepper?"
    assert cards[0].answer == "a < b"


def test_flashcard_empty_after_cleaning():
    with pytest.raises(ValidationError, match="empty once markup is removed"):
        validate_flashcards([{"question": "<b></b>", "answer": "A"}])
