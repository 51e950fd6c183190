"""
Framez Page Builder

Renders AI-generated session summaries from markdown into sanitized HTML
and packages session flashcards as embeddable interactive card decks.
"""

__version__ = "0.1.0"
__author__ = "Framez"

from .core.models import (
    Card,
    CardDeck,
    ContentPackage,
    EmbedReference,
    PackageManifest,
    DeckContent,
    PageResult
)
from .core.exceptions import (
    FramezError,
    ValidationError,
    PackagingError,
    PackagingErrorKind,
    SessionAPIError
)
from .rendering.markdown_renderer import MarkdownRenderer, render_markdown, extract_title
from .packaging.card_deck_packager import CardDeckPackager

__all__ = [
    "Card",
    "CardDeck",
    "ContentPackage",
    "EmbedReference",
    "PackageManifest",
    "DeckContent",
    "PageResult",
    "FramezError",
    "ValidationError",
    "PackagingError",
    "PackagingErrorKind",
    "SessionAPIError",
    "MarkdownRenderer",
    "render_markdown",
    "extract_title",
    "CardDeckPackager"
]
