"""Course page store used by the page builder."""

import logging
import time
from typing import Dict, List, Optional

from ..core.exceptions import StorageError
from ..core.interfaces import PageRepositoryInterface
from ..core.models import PageRecord


logger = logging.getLogger(__name__)


class InMemoryPageRepository(PageRepositoryInterface):
    """In-memory course page store for development and testing."""

    def __init__(self):
        self.pages: Dict[int, PageRecord] = {}
        self._next_id = 1

    def find_by_marker(self, course_id: str, marker: str) -> Optional[PageRecord]:
        for page in self.list_pages(course_id):
            if marker in page.content:
                logger.debug(f"Found page {page.page_id} in course {course_id} for marker {marker}")
                return page
        logger.debug(f"No page in course {course_id} carries marker {marker}")
        return None

    def create(self, course_id: str, name: str, content: str) -> PageRecord:
        page = PageRecord(
            page_id=self._next_id,
            course_id=str(course_id),
            name=name,
            content=content,
            time_modified=time.time()
        )
        self.pages[page.page_id] = page
        self._next_id += 1
        return page

    def update(self, page_id: int, name: str, content: str) -> PageRecord:
        page = self.pages.get(page_id)
        if page is None:
            raise StorageError(f"Page not found: {page_id}")
        page.name = name
        page.content = content
        page.time_modified = time.time()
        return page

    def list_pages(self, course_id: str) -> List[PageRecord]:
        return [p for p in self.pages.values() if p.course_id == str(course_id)]
