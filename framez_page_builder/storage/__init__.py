"""Storage collaborators for packages and course pages."""

from .content_store import (
    InMemoryContentStore,
    FilesystemContentStore,
    ContentStoreFactory
)
from .page_repository import InMemoryPageRepository

__all__ = [
    'InMemoryContentStore',
    'FilesystemContentStore',
    'ContentStoreFactory',
    'InMemoryPageRepository'
]
