"""Markdown to HTML rendering through an ordered pipeline of textual passes."""

import html
import logging
import re
from typing import Callable, Dict, Optional

from ..core.interfaces import HTMLSanitizerInterface
from .sanitizer import HTMLSanitizer


logger = logging.getLogger(__name__)


UNTITLED_PAGE = "Untitled Page"

CODE_BLOCK_PATTERN = re.compile(r'```(?:([\w+-]+)[ \t]*\n|[ \t]*\n)?(.*?)```', re.DOTALL)
HORIZONTAL_RULE_PATTERN = re.compile(r'^(?:-{3,}|\*{3,}|_{3,})[ \t]*$', re.MULTILINE)
BLOCKQUOTE_PATTERN = re.compile(r'^>[ \t]?(.*)$')
UNORDERED_ITEM_PATTERN = re.compile(r'^[-*+][ \t]+(.+)$')
ORDERED_ITEM_PATTERN = re.compile(r'^\d+\.[ \t]+(.+)$')
LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^)\s]+)\)')
INLINE_CODE_PATTERN = re.compile(r'`([^`\n]+)`')
TITLE_PATTERN = re.compile(r'^#+\s+(.+)$')
PARAGRAPH_BREAK_PATTERN = re.compile(r'\n[ \t]*\n')

# Tags and inline code spans are never rewritten by the inline passes.
SEGMENT_PATTERN = re.compile(r'(<[A-Za-z/!][^<>]*>|`[^`\n]+`)')
SHIELD_PATTERN = re.compile(r'\x01(\d+)\x02')
RESERVED_CHARS_PATTERN = re.compile(r'[\x00-\x02]')
BLOCK_LINE_PATTERN = re.compile(r'^\s*</?(?:h[1-6]|ul|ol|li|blockquote|pre|hr|p)\b')

EMPHASIS_RULES = (
    (re.compile(r'\*\*(?!\s)(.+?)(?<!\s)\*\*'), '<strong class="markdown-bold">\\1</strong>'),
    (re.compile(r'(?<!\w)__(?!\s)(.+?)(?<!\s)__(?!\w)'), '<strong class="markdown-bold">\\1</strong>'),
    (re.compile(r'\*(?!\s)(.+?)(?<!\s)\*'), '<em class="markdown-italic">\\1</em>'),
    (re.compile(r'(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)'), '<em class="markdown-italic">\\1</em>'),
    (re.compile(r'~~(?!\s)(.+?)(?<!\s)~~'), '<del class="markdown-strikethrough">\\1</del>'),
)


class MarkdownRenderer:
    """
    Render markdown text into a sanitized HTML fragment.

    Passes run in a fixed order, each over the output of the previous one:
    code blocks, headers, horizontal rules, blockquotes, lists, links,
    emphasis, inline code, paragraph folding and finally sanitization.
    Unmatched syntax is passed through literally; rendering never raises
    for malformed markdown.
    """

    def __init__(self, sanitizer: Optional[HTMLSanitizerInterface] = None):
        """
        Initialize the renderer.

        Args:
            sanitizer: Allow-list filter applied to the final HTML
        """
        self.sanitizer = sanitizer or HTMLSanitizer()

    def render(self, markdown_text: str) -> str:
        """
        Render markdown text to HTML.

        Args:
            markdown_text: Raw markdown text

        Returns:
            Sanitized HTML fragment, empty for empty input
        """
        if not markdown_text:
            return ''

        protected: Dict[str, str] = {}
        # Control characters 0-2 delimit internal tokens
        text = RESERVED_CHARS_PATTERN.sub('', markdown_text.replace('\r\n', '\n'))

        text = self._parse_code_blocks(text, protected)
        text = self._parse_headers(text)
        text = self._parse_horizontal_rules(text)
        text = self._parse_blockquotes(text)
        text = self._parse_lists(text)
        text = self._parse_links(text)
        text = self._parse_emphasis(text)
        text = self._parse_inline_code(text)
        text = self._parse_paragraphs(text, protected)

        for token, block in protected.items():
            text = text.replace(token, block)

        return self.sanitizer.clean(text).strip()

    def extract_title(self, markdown_text: str) -> str:
        """
        Return the text of the first header line of any level.

        Args:
            markdown_text: Raw markdown text

        Returns:
            Header text, or an empty string when there is no header
        """
        for line in (markdown_text or '').split('\n'):
            match = TITLE_PATTERN.match(line.strip())
            if match:
                return match.group(1).strip()
        return ''

    def _parse_code_blocks(self, text: str, protected: Dict[str, str]) -> str:
        """Replace fenced code blocks by placeholders holding escaped HTML."""
        def replace(match: re.Match) -> str:
            language = match.group(1)
            code = html.escape(match.group(2).rstrip('\n'), quote=False)
            code_open = f'<code class="language-{language}">' if language else '<code>'
            token = f'\x00CODEBLOCK{len(protected)}\x00'
            protected[token] = f'<pre class="markdown-code-block">{code_open}{code}</code></pre>'
            return f'\n{token}\n'

        return CODE_BLOCK_PATTERN.sub(replace, text)

    def _parse_headers(self, text: str) -> str:
        # Largest marker first so '##' is never read as '#'
        for level in range(6, 0, -1):
            pattern = re.compile(r'^' + '#' * level + r'[ \t]+(.+?)[ \t]*$', re.MULTILINE)
            replacement = f'<h{level} class="markdown-header markdown-h{level}">\\1</h{level}>'
            text = pattern.sub(replacement, text)
        return text

    def _parse_horizontal_rules(self, text: str) -> str:
        return HORIZONTAL_RULE_PATTERN.sub('<hr class="markdown-hr">', text)

    def _parse_blockquotes(self, text: str) -> str:
        """Group consecutive quote lines into one blockquote."""
        in_quote = False
        result = []

        for line in text.split('\n'):
            match = BLOCKQUOTE_PATTERN.match(line.strip())
            if match:
                if not in_quote:
                    result.append('<blockquote class="markdown-blockquote">')
                    in_quote = True
                content = match.group(1).strip()
                if content:
                    result.append(f'<p class="markdown-quote-text">{content}</p>')
            else:
                if in_quote:
                    result.append('</blockquote>')
                    in_quote = False
                result.append(line)

        if in_quote:
            result.append('</blockquote>')

        return '\n'.join(result)

    def _parse_lists(self, text: str) -> str:
        """Group consecutive list items; a marker change starts a new list."""
        list_type = ''
        result = []

        for line in text.split('\n'):
            trimmed = line.strip()
            match = UNORDERED_ITEM_PATTERN.match(trimmed)
            item_type = 'ul'
            if not match:
                match = ORDERED_ITEM_PATTERN.match(trimmed)
                item_type = 'ol'

            if match:
                if list_type != item_type:
                    if list_type:
                        result.append(f'</{list_type}>')
                    result.append(f'<{item_type} class="markdown-list markdown-{item_type}">')
                    list_type = item_type
                result.append(f'<li class="markdown-list-item">{match.group(1)}</li>')
            else:
                if list_type:
                    result.append(f'</{list_type}>')
                    list_type = ''
                result.append(line)

        if list_type:
            result.append(f'</{list_type}>')

        return '\n'.join(result)

    def _parse_links(self, text: str) -> str:
        def replace(match: re.Match) -> str:
            url = html.escape(match.group(2), quote=True)
            return (f'<a href="{url}" class="markdown-link" target="_blank" '
                    f'rel="noopener noreferrer">{match.group(1)}</a>')

        return self._map_text_segments(text, lambda segment: LINK_PATTERN.sub(replace, segment))

    def _parse_emphasis(self, text: str) -> str:
        """
        Bold, italic and strikethrough; overlapping markers match greedily left to right.

        Tags and inline code spans are swapped for opaque tokens first, so a
        match may span a link or code span but never rewrites inside one.
        """
        shielded = []

        def shield(match: re.Match) -> str:
            shielded.append(match.group(0))
            return f'\x01{len(shielded) - 1}\x02'

        text = SEGMENT_PATTERN.sub(shield, text)
        for pattern, replacement in EMPHASIS_RULES:
            text = pattern.sub(replacement, text)
        return SHIELD_PATTERN.sub(lambda match: shielded[int(match.group(1))], text)

    def _parse_inline_code(self, text: str) -> str:
        def replace(match: re.Match) -> str:
            code = html.escape(match.group(1), quote=False)
            return f'<code class="markdown-inline-code">{code}</code>'

        parts = SEGMENT_PATTERN.split(text)
        for i in range(1, len(parts), 2):
            if parts[i].startswith('`'):
                parts[i] = INLINE_CODE_PATTERN.sub(replace, parts[i])
        return ''.join(parts)

    def _parse_paragraphs(self, text: str, protected: Dict[str, str]) -> str:
        """Fold blank-line separated runs of plain lines into paragraphs."""
        result = []

        for block in PARAGRAPH_BREAK_PATTERN.split(text):
            paragraph = []
            for line in block.split('\n'):
                if BLOCK_LINE_PATTERN.match(line) or line.strip() in protected:
                    self._flush_paragraph(paragraph, result)
                    result.append(line.strip())
                else:
                    paragraph.append(line)
            self._flush_paragraph(paragraph, result)

        return '\n'.join(result)

    @staticmethod
    def _flush_paragraph(paragraph: list, result: list) -> None:
        content = '\n'.join(paragraph).strip()
        if content:
            result.append(f'<p class="markdown-paragraph">{content}</p>')
        paragraph.clear()

    @staticmethod
    def _map_text_segments(text: str, transform: Callable[[str], str]) -> str:
        """Apply ``transform`` to text outside tags and inline code spans."""
        parts = SEGMENT_PATTERN.split(text)
        for i in range(0, len(parts), 2):
            parts[i] = transform(parts[i])
        return ''.join(parts)


_default_renderer: Optional[MarkdownRenderer] = None


def _get_default_renderer() -> MarkdownRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = MarkdownRenderer()
    return _default_renderer


def render_markdown(markdown_text: str) -> str:
    """Render markdown with the default sanitizer configuration."""
    return _get_default_renderer().render(markdown_text)


def extract_title(markdown_text: str) -> str:
    """Return the first header text of ``markdown_text`` or ''."""
    return _get_default_renderer().extract_title(markdown_text)


def page_title(markdown_text: str) -> str:
    """Return the first header text, falling back to 'Untitled Page'."""
    return extract_title(markdown_text) or UNTITLED_PAGE
