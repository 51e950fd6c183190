"""Card deck packaging into portable interactive-content archives."""

import io
import json
import logging
import os
import re
import tempfile
import time
import uuid
import zipfile
from typing import Any, Dict, Optional, Sequence, Tuple

from ..config.configuration_manager import PackagingConfig
from ..core.exceptions import PackagingError, PackagingErrorKind, ValidationError
from ..core.interfaces import LibraryRegistryInterface
from ..core.models import (
    Card,
    ContentPackage,
    DeckContent,
    EmbedReference,
    LibraryDependency,
    PackageManifest
)


logger = logging.getLogger(__name__)


# Display policy, not derived from input
DEFAULT_BEHAVIOUR: Dict[str, bool] = {
    'useCardName': False,
    'disableBackwardsNavigation': False,
    'randomCards': False,
    'autoAdvance': False,
    'showSolutions': True,
    'textualButton': True,
    'separateDialogs': False,
    'showSolutionsRequiresInput': True,
    'caseSensitive': True
}


def sanitize_filename(name: str, fallback: str = "h5p_content") -> str:
    """
    Reduce ``name`` to ``[A-Za-z0-9_-]`` characters.

    Runs of replaced characters collapse to one underscore and leading or
    trailing underscores are trimmed. Returns ``fallback`` if nothing is left.
    """
    name = re.sub(r'[^a-zA-Z0-9_-]', '_', name or '')
    name = re.sub(r'_+', '_', name)
    name = name.strip('_')
    return name or fallback


class CardDeckPackager:
    """
    Build card deck packages from question/answer pairs.

    The packager never touches persistent storage: archives are assembled in
    a scratch directory that is removed on every exit path, and the caller
    receives the bytes plus a generated filename.
    """

    def __init__(self,
                 library_registry: LibraryRegistryInterface,
                 config: Optional[PackagingConfig] = None):
        """
        Initialize the packager.

        Args:
            library_registry: Lookup used to verify the card display library
            config: Packaging configuration
        """
        self.library_registry = library_registry
        self.config = config or PackagingConfig()
        self.dependency = LibraryDependency(
            machine_name=self.config.library,
            major_version=self.config.major_version,
            minor_version=self.config.minor_version
        )

    def build_package(self, cards: Sequence[Card], title: str) -> ContentPackage:
        """
        Build a package for a non-empty deck.

        Args:
            cards: Ordered cards; presentation order is input order
            title: Package title, replaced by the fallback title when blank

        Returns:
            Immutable content package

        Raises:
            ValidationError: If the deck is empty
            PackagingError: If the library is missing or the archive cannot be written
        """
        if not cards:
            raise ValidationError("Card deck is empty; skip packaging instead")

        title = (title or '').strip() or self.config.fallback_title
        self._check_dependency()

        manifest = self.build_manifest(title)
        content = self.build_content(cards)
        logger.debug(f"Packaging {len(content.dialogs)} cards as '{title}'")

        archive_bytes = self._write_archive(manifest, content)
        filename = self.generate_filename(title)

        logger.info(f"Built package {filename} ({len(archive_bytes)} bytes, {len(cards)} cards)")
        return ContentPackage(
            manifest=manifest,
            content=content,
            archive_bytes=archive_bytes,
            filename=filename
        )

    def build_manifest(self, title: str) -> PackageManifest:
        return PackageManifest(
            title=title,
            language=self.config.language,
            main_library=self.dependency.machine_name,
            dependencies=[self.dependency]
        )

    def build_content(self, cards: Sequence[Card]) -> DeckContent:
        """Mirror the deck 1:1 into dialogs, renaming question to text."""
        dialogs = [{'text': card.question, 'answer': card.answer} for card in cards]
        return DeckContent(dialogs=dialogs, behaviour=dict(DEFAULT_BEHAVIOUR))

    def generate_filename(self, title: str) -> str:
        """Return ``<title>_<seconds>_<random>`` plus the package extension."""
        safe_title = sanitize_filename(title, self.config.filename_fallback)
        suffix = uuid.uuid4().hex[:13]
        return f"{safe_title}_{int(time.time())}_{suffix}{self.config.extension}"

    def _check_dependency(self) -> None:
        try:
            present = self.library_registry.has_library(
                self.dependency.machine_name,
                self.dependency.major_version,
                self.dependency.minor_version
            )
        except Exception as e:
            raise PackagingError(
                PackagingErrorKind.MISSING_DEPENDENCY,
                f"Could not verify library {self.dependency}: {e}"
            ) from e

        if not present:
            raise PackagingError(
                PackagingErrorKind.MISSING_DEPENDENCY,
                f"Required library {self.dependency} is not installed"
            )

    def _write_archive(self, manifest: PackageManifest, content: DeckContent) -> bytes:
        """Stage both documents in a scratch directory and zip them."""
        try:
            with tempfile.TemporaryDirectory(prefix="framez_h5p_", dir=self.config.scratch_directory) as workspace:
                manifest_path = os.path.join(workspace, self.config.manifest_entry)
                content_path = os.path.join(workspace, *self.config.content_entry.split('/'))
                os.makedirs(os.path.dirname(content_path), exist_ok=True)

                with open(manifest_path, 'w', encoding='utf-8') as f:
                    json.dump(manifest.to_dict(), f, indent=4, ensure_ascii=False)
                with open(content_path, 'w', encoding='utf-8') as f:
                    json.dump(content.to_dict(), f, indent=4, ensure_ascii=False)

                archive_path = os.path.join(workspace, "package" + self.config.extension)
                with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
                    archive.write(manifest_path, self.config.manifest_entry)
                    archive.write(content_path, self.config.content_entry)

                with open(archive_path, 'rb') as f:
                    return f.read()
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            logger.error(f"Package archive construction failed: {e}")
            raise PackagingError(PackagingErrorKind.ARCHIVE_FAILURE, f"Could not write package archive: {e}") from e


def read_package(archive_bytes: bytes,
                 manifest_entry: str = "h5p.json",
                 content_entry: str = "content/content.json") -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Decode the manifest and content documents of a built archive.

    Raises:
        PackagingError: If the archive is unreadable or an entry is missing
    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive_bytes)) as archive:
            manifest = json.loads(archive.read(manifest_entry).decode('utf-8'))
            content = json.loads(archive.read(content_entry).decode('utf-8'))
    except (KeyError, zipfile.BadZipFile, ValueError) as e:
        raise PackagingError(PackagingErrorKind.ARCHIVE_FAILURE, f"Invalid package archive: {e}") from e
    return manifest, content


def embed_reference_for(package: ContentPackage) -> EmbedReference:
    """Return the placeholder reference for a package."""
    return EmbedReference(filename=package.filename)
