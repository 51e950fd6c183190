"""Caller-level validation of summaries and flashcards."""

from typing import Any, List, Optional

from .core.exceptions import ValidationError
from .core.models import Card
from .rendering.sanitizer import HTMLSanitizer


REQUIRED_CARD_FIELDS = ('question', 'answer')


def validate_markdown_summary(summary_text: Any) -> str:
    """Return the summary text, rejecting empty or blank input."""
    if not isinstance(summary_text, str) or not summary_text.strip():
        raise ValidationError("Summary text cannot be empty")
    return summary_text


def validate_flashcards(flashcards: Any, sanitizer: Optional[HTMLSanitizer] = None) -> List[Card]:
    """
    Validate raw flashcards and convert them to cards.

    Each item must be a mapping with non-empty ``question`` and ``answer``
    fields. Both are reduced to plain text; other fields are kept on
    ``Card.extra``. An empty list is valid and yields an empty deck.

    Raises:
        ValidationError: On the first invalid item
    """
    if not isinstance(flashcards, list):
        raise ValidationError("Flashcards must be an array")

    sanitizer = sanitizer or HTMLSanitizer()
    cards = []
    for index, item in enumerate(flashcards):
        if not isinstance(item, dict):
            raise ValidationError(f"Flashcard at index {index} must be an object")

        for field_name in REQUIRED_CARD_FIELDS:
            value = item.get(field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Flashcard at index {index} must contain '{field_name}' field")

        card = Card.from_dict(item)
        card.question = sanitizer.clean_text(card.question)
        card.answer = sanitizer.clean_text(card.answer)
        if not card.question or not card.answer:
            raise ValidationError(f"Flashcard at index {index} is empty once markup is removed")
        cards.append(card)

    return cards
