"""Core components and data models for the Framez page builder."""

from .models import (
    Card,
    CardDeck,
    LibraryDependency,
    PackageManifest,
    DeckContent,
    ContentPackage,
    EmbedReference,
    StoredContent,
    SessionData,
    PageRecord,
    PageResult,
    EMBED_SENTINEL
)

from .interfaces import (
    HTMLSanitizerInterface,
    LibraryRegistryInterface,
    ContentStorageInterface,
    PageRepositoryInterface
)

from .exceptions import (
    FramezError,
    ValidationError,
    PackagingError,
    PackagingErrorKind,
    SessionAPIError,
    StorageError
)

__all__ = [
    "Card",
    "CardDeck",
    "LibraryDependency",
    "PackageManifest",
    "DeckContent",
    "ContentPackage",
    "EmbedReference",
    "StoredContent",
    "SessionData",
    "PageRecord",
    "PageResult",
    "EMBED_SENTINEL",
    "HTMLSanitizerInterface",
    "LibraryRegistryInterface",
    "ContentStorageInterface",
    "PageRepositoryInterface",
    "FramezError",
    "ValidationError",
    "PackagingError",
    "PackagingErrorKind",
    "SessionAPIError",
    "StorageError"
]
