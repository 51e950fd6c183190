"""Tests for card deck packaging and library registries."""

import io
import json
import re
import zipfile

import pytest

from framez_page_builder.config.configuration_manager import PackagingConfig
from framez_page_builder.core.exceptions import PackagingError, PackagingErrorKind, ValidationError
from framez_page_builder.core.interfaces import LibraryRegistryInterface
from framez_page_builder.core.models import Card
from framez_page_builder.packaging.card_deck_packager import (
    CardDeckPackager,
    DEFAULT_BEHAVIOUR,
    embed_reference_for,
    read_package,
    sanitize_filename
)
from framez_page_builder.packaging.library_registry import (
    FilesystemLibraryRegistry,
    InMemoryLibraryRegistry,
    LibraryRegistryFactory,
    parse_library_id
)


FILENAME_PATTERN = re.compile(r'^[A-Za-z0-9_-]+\.h5p$')


@pytest.fixture
def registry():
    return InMemoryLibraryRegistry(["H5P.Dialogcards-1.9"])


@pytest.fixture
def packager(registry):
    return CardDeckPackager(registry, PackagingConfig())


@pytest.fixture
def cards():
    return [
        Card("What is 2+2?", "4"),
        Card("Capital of France?", "Paris"),
        Card("Größte Stadt?", "Berlin")
    ]


def test_package_round_trip(packager, cards):
    package = packager.build_package(cards, "Arithmetic")
    manifest, content = read_package(package.archive_bytes)

    assert content["dialogs"] == [
        {"text": "What is 2+2?", "answer": "4"},
        {"text": "Capital of France?", "answer": "Paris"},
        {"text": "Größte Stadt?", "answer": "Berlin"}
    ]
    assert content["behaviour"] == DEFAULT_BEHAVIOUR
    assert manifest["title"] == "Arithmetic"
    assert manifest["mainLibrary"] == "H5P.Dialogcards"
    assert manifest["preloadedDependencies"] == [
        {"machineName": "H5P.Dialogcards", "majorVersion": "1", "minorVersion": "9"}
    ]
    assert package.size == len(package.archive_bytes)


def test_archive_holds_exactly_two_entries(packager, cards):
    package = packager.build_package(cards, "Entries")
    with zipfile.ZipFile(io.BytesIO(package.archive_bytes)) as archive:
        assert sorted(archive.namelist()) == ["content/content.json", "h5p.json"]


def test_configured_entry_names(registry, cards):
    config = PackagingConfig(manifest_entry="manifest.json")
    package = CardDeckPackager(registry, config).build_package(cards, "Named")
    manifest, _ = read_package(package.archive_bytes, manifest_entry="manifest.json")
    assert manifest["title"] == "Named"


def test_single_card_deck(packager):
    package = packager.build_package([Card("Q", "A")], "One")
    _, content = read_package(package.archive_bytes)
    assert content["dialogs"] == [{"text": "Q", "answer": "A"}]


def test_empty_deck_is_rejected(packager):
    with pytest.raises(ValidationError):
        packager.build_package([], "Nothing")


def test_blank_title_uses_fallback(packager, cards):
    package = packager.build_package(cards, "   ")
    assert package.manifest.title == "Dialog Cards"
    assert package.filename.startswith("Dialog_Cards_")


def test_filename_is_safe_and_unique(packager, cards):
    first = packager.build_package(cards, "My Title!!")
    second = packager.build_package(cards, "My Title!!")

    assert FILENAME_PATTERN.match(first.filename)
    assert FILENAME_PATTERN.match(second.filename)
    assert first.filename.startswith("My_Title_")
    assert first.filename != second.filename


def test_title_with_no_safe_characters(packager, cards):
    package = packager.build_package(cards, "!!!")
    assert package.manifest.title == "!!!"
    assert package.filename.startswith("h5p_content_")
    assert FILENAME_PATTERN.match(package.filename)


def test_sanitize_filename():
    assert sanitize_filename("My Title!!") == "My_Title"
    assert sanitize_filename("Dialog Cards - Week 1") == "Dialog_Cards_-_Week_1"
    assert sanitize_filename("") == "h5p_content"
    assert sanitize_filename("***", fallback="deck") == "deck"


def test_missing_library(cards):
    packager = CardDeckPackager(InMemoryLibraryRegistry(), PackagingConfig())
    with pytest.raises(PackagingError) as exc_info:
        packager.build_package(cards, "Missing")
    assert exc_info.value.kind is PackagingErrorKind.MISSING_DEPENDENCY
    assert "missing_dependency" in str(exc_info.value)


def test_other_library_version_does_not_satisfy(cards):
    packager = CardDeckPackager(InMemoryLibraryRegistry(["H5P.Dialogcards-1.8"]), PackagingConfig())
    with pytest.raises(PackagingError) as exc_info:
        packager.build_package(cards, "Old")
    assert exc_info.value.kind is PackagingErrorKind.MISSING_DEPENDENCY


def test_registry_failure_is_missing_dependency(cards):
    class BrokenRegistry(LibraryRegistryInterface):
        def has_library(self, machine_name, major_version, minor_version):
            raise RuntimeError("registry offline")

    packager = CardDeckPackager(BrokenRegistry(), PackagingConfig())
    with pytest.raises(PackagingError) as exc_info:
        packager.build_package(cards, "Broken")
    assert exc_info.value.kind is PackagingErrorKind.MISSING_DEPENDENCY
    assert "registry offline" in str(exc_info.value)


def test_archive_failure_cleans_scratch(registry, cards, tmp_path, monkeypatch):
    def failing_zip(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(
        "framez_page_builder.packaging.card_deck_packager.zipfile.ZipFile",
        failing_zip
    )
    packager = CardDeckPackager(registry, PackagingConfig(scratch_directory=str(tmp_path)))

    with pytest.raises(PackagingError) as exc_info:
        packager.build_package(cards, "Doomed")
    assert exc_info.value.kind is PackagingErrorKind.ARCHIVE_FAILURE
    assert list(tmp_path.iterdir()) == []


def test_missing_scratch_directory_is_archive_failure(registry, cards, tmp_path):
    config = PackagingConfig(scratch_directory=str(tmp_path / "does-not-exist"))
    with pytest.raises(PackagingError) as exc_info:
        CardDeckPackager(registry, config).build_package(cards, "Nowhere")
    assert exc_info.value.kind is PackagingErrorKind.ARCHIVE_FAILURE


def test_scratch_is_removed_after_success(registry, cards, tmp_path):
    packager = CardDeckPackager(registry, PackagingConfig(scratch_directory=str(tmp_path)))
    packager.build_package(cards, "Clean")
    assert list(tmp_path.iterdir()) == []


def test_read_package_rejects_garbage():
    with pytest.raises(PackagingError) as exc_info:
        read_package(b"not a zip")
    assert exc_info.value.kind is PackagingErrorKind.ARCHIVE_FAILURE


def test_embed_reference_for(packager, cards):
    package = packager.build_package(cards, "Ref")
    reference = embed_reference_for(package)
    assert reference.filename == package.filename
    assert reference.token == f"@@PLUGINFILE@@/{package.filename}"


def test_parse_library_id():
    assert parse_library_id("H5P.Dialogcards-1.9") == ("H5P.Dialogcards", 1, 9)
    with pytest.raises(ValueError):
        parse_library_id("H5P.Dialogcards")


def test_filesystem_registry(tmp_path):
    library_dir = tmp_path / "H5P.Dialogcards-1.9"
    library_dir.mkdir()
    (library_dir / "library.json").write_text(json.dumps({
        "machineName": "H5P.Dialogcards",
        "majorVersion": 1,
        "minorVersion": 9
    }), encoding="utf-8")
    (tmp_path / "H5P.Broken-1.0").mkdir()
    (tmp_path / "H5P.Broken-1.0" / "library.json").write_text("{not json", encoding="utf-8")

    registry = FilesystemLibraryRegistry(str(tmp_path))
    assert registry.has_library("H5P.Dialogcards", 1, 9)
    assert not registry.has_library("H5P.Dialogcards", 1, 8)
    assert not registry.has_library("H5P.Broken", 1, 0)
    assert registry.list_libraries() == ["H5P.Broken-1.0", "H5P.Dialogcards-1.9"]


def test_registry_factory(tmp_path):
    memory = LibraryRegistryFactory.create("memory", {"installed": ["H5P.Dialogcards-1.9"]})
    assert memory.has_library("H5P.Dialogcards", 1, 9)

    filesystem = LibraryRegistryFactory.create("filesystem", {"directory": str(tmp_path)})
    assert isinstance(filesystem, FilesystemLibraryRegistry)

    with pytest.raises(ValueError):
        LibraryRegistryFactory.create("database")
    assert LibraryRegistryFactory.get_supported_types() == ["memory", "filesystem"]
