"""Markdown rendering and page assembly."""

from .sanitizer import HTMLSanitizer
from .markdown_renderer import (
    MarkdownRenderer,
    render_markdown,
    extract_title,
    page_title
)
from .page_renderer import (
    PageRenderer,
    PageTemplate,
    find_embed_reference,
    add_page_markers,
    namespace_marker
)

__all__ = [
    "HTMLSanitizer",
    "MarkdownRenderer",
    "render_markdown",
    "extract_title",
    "page_title",
    "PageRenderer",
    "PageTemplate",
    "find_embed_reference",
    "add_page_markers",
    "namespace_marker"
]
