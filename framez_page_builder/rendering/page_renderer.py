"""Course page assembly: rendered summary, card deck placeholder and markers."""

import html
import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..core.models import EmbedReference, EMBED_SENTINEL


logger = logging.getLogger(__name__)


SERVICE_MARKER = "<!-- e9f4b5a1-13c5-4278-824c-05a8ac066e07 -->"
NAMESPACE_MARKER_TEMPLATE = "<!-- namespace_id:{namespace_id} -->"

PLACEHOLDER_PATTERN = re.compile(
    r'<div class="h5p-placeholder"[^>]*>\s*' + re.escape(EMBED_SENTINEL) + r'/([^<\s]+)\s*</div>'
)
NAMESPACE_MARKER_PATTERN = re.compile(r'<!--\s*namespace_id:(\S+?)\s*-->')


@dataclass
class PageTemplate:
    """Templates used to lay out a course page."""
    page_template: str = (
        '<div class="framez-page">\n'
        '<div class="framez-summary">\n{summary}\n</div>\n'
        '{cards_section}'
        '</div>'
    )
    cards_section_template: str = (
        '<div class="framez-h5p-section">\n{placeholder}\n</div>\n'
    )
    placeholder_template: str = (
        '<div class="h5p-placeholder" contenteditable="false">{token}</div>'
    )


class PageRenderer:
    """Lays out page content around an already rendered summary fragment."""

    def __init__(self, template: Optional[PageTemplate] = None):
        self.template = template or PageTemplate()

    def placeholder_html(self, reference: EmbedReference) -> str:
        """Return the placeholder element a downstream renderer resolves."""
        return self.template.placeholder_template.format(token=html.escape(reference.token))

    def render_page(self, summary_html: str, reference: Optional[EmbedReference] = None) -> str:
        """
        Render the complete page content.

        Args:
            summary_html: Rendered and sanitized summary fragment
            reference: Card deck package to embed, if any

        Returns:
            Page HTML
        """
        cards_section = ''
        if reference is not None:
            cards_section = self.template.cards_section_template.format(
                placeholder=self.placeholder_html(reference)
            )

        page = self.template.page_template.format(summary=summary_html, cards_section=cards_section)
        logger.debug(f"Rendered page content ({len(page)} chars, embedded package: {reference is not None})")
        return page


def find_embed_reference(page_html: str) -> Optional[EmbedReference]:
    """Return the package placeholder embedded in ``page_html``, if any."""
    match = PLACEHOLDER_PATTERN.search(page_html or '')
    if not match:
        return None
    return EmbedReference(filename=html.unescape(match.group(1)))


def namespace_marker(namespace_id: str) -> str:
    """Return the marker comment identifying a session's page."""
    return NAMESPACE_MARKER_TEMPLATE.format(namespace_id=namespace_id)


def add_page_markers(page_html: str, namespace_id: str) -> str:
    """Prefix page content with the service and namespace comments."""
    body = page_html.replace(SERVICE_MARKER, '')
    body = NAMESPACE_MARKER_PATTERN.sub('', body).lstrip('\n')
    return f"{SERVICE_MARKER}\n{namespace_marker(namespace_id)}\n{body}"
