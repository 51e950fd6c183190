"""Card deck packaging."""

from .card_deck_packager import (
    CardDeckPackager,
    DEFAULT_BEHAVIOUR,
    sanitize_filename,
    read_package,
    embed_reference_for
)
from .library_registry import (
    InMemoryLibraryRegistry,
    FilesystemLibraryRegistry,
    LibraryRegistryFactory,
    parse_library_id
)

__all__ = [
    "CardDeckPackager",
    "DEFAULT_BEHAVIOUR",
    "sanitize_filename",
    "read_package",
    "embed_reference_for",
    "InMemoryLibraryRegistry",
    "FilesystemLibraryRegistry",
    "LibraryRegistryFactory",
    "parse_library_id"
]
