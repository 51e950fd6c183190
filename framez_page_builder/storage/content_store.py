"""Content storage implementations for built packages."""

import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..core.exceptions import StorageError
from ..core.interfaces import ContentStorageInterface
from ..core.models import StoredContent


logger = logging.getLogger(__name__)


class InMemoryContentStore(ContentStorageInterface):
    """
    Simple in-memory content store for development and testing.

    References are the filenames themselves.
    """

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.metadata: Dict[str, Dict[str, Any]] = {}
        logger.info("Initialized InMemoryContentStore")

    def write(self, filename: str, data: bytes, metadata: Optional[Dict[str, Any]] = None) -> StoredContent:
        if filename in self.files:
            raise StorageError(f"File already exists: {filename}")

        self.files[filename] = bytes(data)
        self.metadata[filename] = dict(metadata or {})
        logger.debug(f"Stored {filename} ({len(data)} bytes)")
        return StoredContent(
            reference=filename,
            filename=filename,
            size=len(data),
            metadata=self.metadata[filename]
        )

    def read(self, reference: str) -> bytes:
        if reference not in self.files:
            raise StorageError(f"Stored content not found: {reference}")
        return self.files[reference]

    def delete(self, reference: str) -> None:
        if reference in self.files:
            del self.files[reference]
            self.metadata.pop(reference, None)
            logger.debug(f"Deleted {reference}")
        else:
            logger.warning(f"Stored content {reference} not found for deletion")

    def list_files(self) -> List[str]:
        return sorted(self.files)


class FilesystemContentStore(ContentStorageInterface):
    """
    Content store writing packages into a directory.

    Metadata is kept next to each file as ``<filename>.meta.json``.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized FilesystemContentStore at {self.directory}")

    def _path(self, reference: str) -> Path:
        path = (self.directory / reference).resolve()
        if path.parent != self.directory.resolve():
            raise StorageError(f"Invalid content reference: {reference}")
        return path

    def write(self, filename: str, data: bytes, metadata: Optional[Dict[str, Any]] = None) -> StoredContent:
        path = self._path(filename)
        try:
            # 'xb' refuses to overwrite an existing package
            with open(path, 'xb') as f:
                f.write(data)
            with open(str(path) + '.meta.json', 'w', encoding='utf-8') as f:
                json.dump(metadata or {}, f, indent=2)
        except FileExistsError as e:
            raise StorageError(f"File already exists: {filename}") from e
        except OSError as e:
            raise StorageError(f"Could not store {filename}: {e}") from e

        logger.debug(f"Stored {filename} in {self.directory}")
        return StoredContent(
            reference=filename,
            filename=filename,
            size=len(data),
            metadata=dict(metadata or {})
        )

    def read(self, reference: str) -> bytes:
        path = self._path(reference)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Stored content not found: {reference}") from e

    def delete(self, reference: str) -> None:
        path = self._path(reference)
        meta = Path(str(path) + '.meta.json')
        if not path.exists():
            logger.warning(f"Stored content {reference} not found for deletion")
            return
        try:
            path.unlink()
            if meta.exists():
                meta.unlink()
        except OSError as e:
            raise StorageError(f"Could not delete {reference}: {e}") from e
        logger.debug(f"Deleted {reference} from {self.directory}")


class ContentStoreFactory:
    """Factory for creating content store instances."""

    @staticmethod
    def create(store_type: str, config: Dict = None) -> ContentStorageInterface:
        """
        Create a content store.

        Args:
            store_type: "memory" or "filesystem"
            config: Store configuration (``directory`` for filesystem)

        Raises:
            ValueError: If the store type is not supported
        """
        config = config or {}
        if store_type == "memory":
            return InMemoryContentStore()
        elif store_type == "filesystem":
            return FilesystemContentStore(config["directory"])
        else:
            raise ValueError(f"Unsupported storage type: {store_type}")

    @staticmethod
    def get_supported_types() -> List[str]:
        return ["memory", "filesystem"]
