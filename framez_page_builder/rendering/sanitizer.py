"""Allow-list HTML sanitization backed by nh3."""

import html
import logging
from typing import Optional

import nh3

from ..config.configuration_manager import SanitizerConfig
from ..core.interfaces import HTMLSanitizerInterface


logger = logging.getLogger(__name__)


class HTMLSanitizer(HTMLSanitizerInterface):
    """
    Strip every tag and attribute not named by a ``SanitizerConfig``.

    This is the last pass of every render and must never be skipped.
    """

    def __init__(self, config: Optional[SanitizerConfig] = None):
        self.config = config or SanitizerConfig()

    def clean(self, html_text: str) -> str:
        """Filter ``html_text`` through the configured allow-list."""
        if not html_text:
            return ""
        return nh3.clean(
            html_text,
            tags=self.config.tags,
            attributes=self.config.attributes,
            url_schemes=self.config.url_schemes,
            link_rel=self.config.link_rel,
            strip_comments=self.config.strip_comments
        )

    def clean_text(self, text: str) -> str:
        """Remove all markup and return plain text."""
        if not text:
            return ""
        return html.unescape(nh3.clean(text, tags=set(), attributes={})).strip()
