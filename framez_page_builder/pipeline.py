"""Main pipeline orchestrator: session data to a course page with an embedded card deck."""

import logging
from typing import Optional, Sequence, Tuple

from .api.session_client import SessionAPIClient
from .config.configuration_manager import ConfigurationManager, Configuration
from .core.exceptions import StorageError
from .core.interfaces import (
    ContentStorageInterface,
    LibraryRegistryInterface,
    PageRepositoryInterface
)
from .core.models import Card, ContentPackage, PageResult
from .packaging.card_deck_packager import CardDeckPackager, embed_reference_for
from .packaging.library_registry import LibraryRegistryFactory
from .rendering.markdown_renderer import MarkdownRenderer, page_title
from .rendering.page_renderer import (
    PageRenderer,
    add_page_markers,
    find_embed_reference,
    namespace_marker
)
from .rendering.sanitizer import HTMLSanitizer
from .storage.content_store import ContentStoreFactory
from .storage.page_repository import InMemoryPageRepository
from .validation import validate_flashcards, validate_markdown_summary


logger = logging.getLogger(__name__)


DECK_TITLE_TEMPLATE = "Dialog Cards - {namespace_name}"
PAGE_NAME_MAX_LENGTH = 255


class CoursePageBuilder:
    """
    Builds or refreshes the course page of a session.

    The page holds the rendered summary and, when the session has
    flashcards, a placeholder pointing at a stored card deck package.
    Pages are matched to sessions through a namespace marker comment, so
    running the builder twice for a session updates the same page.
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 config: Optional[Configuration] = None,
                 session_client: Optional[SessionAPIClient] = None,
                 library_registry: Optional[LibraryRegistryInterface] = None,
                 content_store: Optional[ContentStorageInterface] = None,
                 page_repository: Optional[PageRepositoryInterface] = None,
                 setup_logging: bool = False):
        """
        Initialize the page builder.

        Args:
            config_path: Path to configuration file
            config: Pre-configured Configuration object (overrides config_path)
            session_client: Session API client, built from config when omitted
            library_registry: Library lookup, built from config when omitted
            content_store: Package storage, built from config when omitted
            page_repository: Course page store, in-memory when omitted
            setup_logging: Configure root logging from the logging section
        """
        if config is not None:
            self.config_manager = ConfigurationManager()
            self.config_manager.config = config
        else:
            self.config_manager = ConfigurationManager(config_path)

        self.config = self.config_manager.get_config()
        self.config_manager.validate_config()

        if setup_logging:
            self._setup_logging()

        self.sanitizer = HTMLSanitizer(self.config.sanitizer)
        self.renderer = MarkdownRenderer(self.sanitizer)
        self.page_renderer = PageRenderer()

        self.library_registry = library_registry or LibraryRegistryFactory.create(
            registry_type=self.config.libraries.type,
            config=self.config.libraries.__dict__
        )
        self.packager = CardDeckPackager(self.library_registry, self.config.packaging)

        self.content_store = content_store or ContentStoreFactory.create(
            store_type=self.config.storage.type,
            config=self.config.storage.__dict__
        )
        self.page_repository = page_repository or InMemoryPageRepository()
        self._session_client = session_client

        logger.info("CoursePageBuilder initialized")
        logger.debug(self.config_manager.get_summary())

    @property
    def session_client(self) -> SessionAPIClient:
        if self._session_client is None:
            self._session_client = SessionAPIClient(self.config.api)
        return self._session_client

    def build_page_content(self,
                           summary_markdown: str,
                           cards: Sequence[Card],
                           title: str) -> Tuple[str, Optional[ContentPackage]]:
        """
        Render a summary and package its cards.

        An empty deck produces no package and no placeholder.

        Returns:
            Page HTML and the package, if one was built
        """
        summary_html = self.renderer.render(summary_markdown)

        package = None
        reference = None
        if cards:
            package = self.packager.build_package(cards, title)
            reference = embed_reference_for(package)
        else:
            logger.info("No flashcards; skipping card deck packaging")

        return self.page_renderer.render_page(summary_html, reference), package

    def create_course_page(self, course_id: str, namespace_id: str) -> PageResult:
        """
        Fetch a session from the API and create or update its course page.

        Raises:
            SessionAPIError: If the session cannot be fetched
            ValidationError: If the summary or flashcards are invalid
            PackagingError: If the card deck cannot be packaged
        """
        logger.info(f"Building page for session {namespace_id} in course {course_id}")
        session = self.session_client.fetch_session_data(namespace_id, course_id)

        summary = validate_markdown_summary(session.summary)
        cards = validate_flashcards(session.flashcards, self.sanitizer)

        return self.publish_page(course_id, namespace_id, session.namespace_name, summary, cards)

    def publish_page(self,
                     course_id: str,
                     namespace_id: str,
                     namespace_name: str,
                     summary_markdown: str,
                     cards: Sequence[Card]) -> PageResult:
        """
        Build page content from validated input and upsert the page.

        The page is named after the namespace, or after the summary's first
        header when the namespace name is blank. A package stored for a page
        that then fails to save is removed again.
        """
        title = DECK_TITLE_TEMPLATE.format(namespace_name=namespace_name)
        page_name = (namespace_name or '').strip()[:PAGE_NAME_MAX_LENGTH] or page_title(summary_markdown)
        page_html, package = self.build_page_content(summary_markdown, cards, title)

        stored = None
        if package is not None:
            stored = self.content_store.write(
                package.filename,
                package.archive_bytes,
                {
                    'course_id': str(course_id),
                    'namespace_id': namespace_id,
                    'title': package.manifest.title,
                    'cards': len(package.content.dialogs)
                }
            )

        content = add_page_markers(page_html, namespace_id)
        try:
            existing = self.page_repository.find_by_marker(course_id, namespace_marker(namespace_id))
            if existing is None:
                page = self.page_repository.create(course_id, page_name, content)
            else:
                previous = find_embed_reference(existing.content)
                page = self.page_repository.update(existing.page_id, page_name, content)
        except Exception:
            if package is not None:
                logger.error(f"Page upsert failed for session {namespace_id}; removing package {package.filename}")
                self._discard_package(package.filename)
            raise

        if existing is None:
            logger.info(f"Created page {page.page_id} for session {namespace_id}")
            return PageResult(page_id=page.page_id, action='created', package=package, stored=stored)

        warnings = []
        if previous is not None and (package is None or previous.filename != package.filename):
            warning = self._discard_package(previous.filename)
            if warning:
                warnings.append(warning)

        logger.info(f"Updated page {page.page_id} for session {namespace_id}")
        return PageResult(page_id=page.page_id, action='updated', package=package, stored=stored, warnings=warnings)

    def _discard_package(self, filename: str) -> Optional[str]:
        """Delete a stored package; returns a warning instead of raising."""
        try:
            self.content_store.delete(filename)
            logger.debug(f"Removed package {filename}")
            return None
        except StorageError as e:
            message = f"Could not remove package {filename}: {e}"
            logger.warning(message)
            return message

    def _setup_logging(self) -> None:
        """Setup logging configuration."""
        handlers = [logging.StreamHandler()]
        if self.config.logging.file:
            handlers.append(logging.FileHandler(self.config.logging.file, encoding='utf-8'))

        logging.basicConfig(
            level=getattr(logging, self.config.logging.level.upper(), logging.INFO),
            format=self.config.logging.format,
            handlers=handlers
        )
