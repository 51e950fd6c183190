"""Content-type library registries used to check packaging dependencies."""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..core.interfaces import LibraryRegistryInterface


logger = logging.getLogger(__name__)


LIBRARY_ID_PATTERN = re.compile(r'^(?P<name>[\w.]+)-(?P<major>\d+)\.(?P<minor>\d+)$')


def parse_library_id(library_id: str) -> Tuple[str, int, int]:
    """
    Split an identifier such as ``H5P.Dialogcards-1.9``.

    Raises:
        ValueError: If the identifier is not ``<machineName>-<major>.<minor>``
    """
    match = LIBRARY_ID_PATTERN.match(library_id.strip())
    if not match:
        raise ValueError(f"Invalid library identifier: {library_id}")
    return match.group('name'), int(match.group('major')), int(match.group('minor'))


class InMemoryLibraryRegistry(LibraryRegistryInterface):
    """Registry backed by a set of installed library versions."""

    def __init__(self, installed: Optional[Iterable[str]] = None):
        """
        Initialize the registry.

        Args:
            installed: Library identifiers like ``H5P.Dialogcards-1.9``
        """
        self.installed: Set[Tuple[str, int, int]] = set()
        for library_id in installed or []:
            self.install(*parse_library_id(library_id))

    def install(self, machine_name: str, major_version: int, minor_version: int) -> None:
        self.installed.add((machine_name, major_version, minor_version))

    def uninstall(self, machine_name: str, major_version: int, minor_version: int) -> None:
        self.installed.discard((machine_name, major_version, minor_version))

    def has_library(self, machine_name: str, major_version: int, minor_version: int) -> bool:
        return (machine_name, major_version, minor_version) in self.installed


class FilesystemLibraryRegistry(LibraryRegistryInterface):
    """
    Registry reading an unpacked library directory.

    A library version is present when ``<root>/<machineName>-<major>.<minor>/library.json``
    exists and declares the same machine name and version.
    """

    def __init__(self, root: str):
        self.root = Path(root)

    def has_library(self, machine_name: str, major_version: int, minor_version: int) -> bool:
        library_json = self.root / f"{machine_name}-{major_version}.{minor_version}" / "library.json"
        if not library_json.is_file():
            logger.debug(f"Library descriptor not found: {library_json}")
            return False

        try:
            descriptor = json.loads(library_json.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable library descriptor {library_json}: {e}")
            return False

        return (
            descriptor.get('machineName') == machine_name
            and int(descriptor.get('majorVersion', -1)) == major_version
            and int(descriptor.get('minorVersion', -1)) == minor_version
        )

    def list_libraries(self) -> List[str]:
        """List the library directories found under the root."""
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name for entry in self.root.iterdir()
            if entry.is_dir() and LIBRARY_ID_PATTERN.match(entry.name)
        )


class LibraryRegistryFactory:
    """Factory for creating library registry instances."""

    @staticmethod
    def create(registry_type: str, config: Dict = None) -> LibraryRegistryInterface:
        """
        Create a library registry.

        Args:
            registry_type: "memory" or "filesystem"
            config: Registry configuration (``installed`` or ``directory``)

        Raises:
            ValueError: If the registry type is not supported
        """
        config = config or {}
        if registry_type == "memory":
            if not config.get("installed"):
                logger.warning("In-memory library registry has no installed libraries; packaging will fail")
            return InMemoryLibraryRegistry(config.get("installed"))
        elif registry_type == "filesystem":
            return FilesystemLibraryRegistry(config["directory"])
        else:
            raise ValueError(f"Unsupported library registry type: {registry_type}")

    @staticmethod
    def get_supported_types() -> List[str]:
        return ["memory", "filesystem"]
