"""Error taxonomy for the Framez page builder."""

from enum import Enum


class FramezError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(FramezError):
    """Input text or card fields failed validation before processing began."""


class PackagingErrorKind(Enum):
    """Reasons a card deck package could not be built."""
    MISSING_DEPENDENCY = "missing_dependency"
    ARCHIVE_FAILURE = "archive_failure"


class PackagingError(FramezError):
    """Package construction aborted; nothing was produced."""

    def __init__(self, kind: PackagingErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


class SessionAPIError(FramezError):
    """The remote session API returned an unusable response."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class StorageError(FramezError):
    """A storage collaborator could not read or write content."""
