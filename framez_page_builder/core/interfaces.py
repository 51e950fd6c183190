"""Abstract interfaces for the collaborators the pipeline depends on."""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional

from .models import StoredContent, PageRecord


class HTMLSanitizerInterface(ABC):
    """Abstract interface for allow-list HTML filters."""

    @abstractmethod
    def clean(self, html: str) -> str:
        """Return ``html`` with disallowed tags and attributes removed."""
        pass


class LibraryRegistryInterface(ABC):
    """Abstract interface for content-type library lookups."""

    @abstractmethod
    def has_library(self, machine_name: str, major_version: int, minor_version: int) -> bool:
        """Check whether a library version is installed."""
        pass


class ContentStorageInterface(ABC):
    """Abstract interface for content storage."""

    @abstractmethod
    def write(self, filename: str, data: bytes, metadata: Optional[Dict[str, Any]] = None) -> StoredContent:
        """Store bytes under a filename and return a reference."""
        pass

    @abstractmethod
    def read(self, reference: str) -> bytes:
        """Read stored bytes back."""
        pass

    @abstractmethod
    def delete(self, reference: str) -> None:
        """Delete stored content."""
        pass


class PageRepositoryInterface(ABC):
    """Abstract interface for the host platform's course page store."""

    @abstractmethod
    def find_by_marker(self, course_id: str, marker: str) -> Optional[PageRecord]:
        """Find a page of a course whose content contains ``marker``."""
        pass

    @abstractmethod
    def create(self, course_id: str, name: str, content: str) -> PageRecord:
        """Create a new page."""
        pass

    @abstractmethod
    def update(self, page_id: int, name: str, content: str) -> PageRecord:
        """Replace the name and content of an existing page."""
        pass

    @abstractmethod
    def list_pages(self, course_id: str) -> List[PageRecord]:
        """List every page of a course."""
        pass
