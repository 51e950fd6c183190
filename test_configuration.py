"""Tests for configuration loading, validation and persistence."""

import json

import pytest
import yaml

from framez_page_builder.config.configuration_manager import (
    Configuration,
    ConfigurationManager,
    SanitizerConfig
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for name in ("FRAMEZ_API_SERVER", "FRAMEZ_API_TOKEN", "FRAMEZ_CLIENT_ID", "FRAMEZ_STORAGE_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env or config/default.yaml out of the way
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = ConfigurationManager().get_config()

    assert config.packaging.library == "H5P.Dialogcards"
    assert (config.packaging.major_version, config.packaging.minor_version) == (1, 9)
    assert config.packaging.manifest_entry == "h5p.json"
    assert config.storage.type == "memory"
    assert "script" not in config.sanitizer.tags
    assert "rel" not in config.sanitizer.attributes["a"]


def test_load_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump({
        "packaging": {"language": "de", "fallback_title": "Karteikarten"},
        "api": {"server": "api.framez.test", "max_retries": 5},
        "sanitizer": {"tags": ["p", "a"], "attributes": {"a": ["href"]}}
    }), encoding="utf-8")

    manager = ConfigurationManager(str(path))
    config = manager.get_config()

    assert config.packaging.language == "de"
    assert config.packaging.fallback_title == "Karteikarten"
    assert config.api.server == "api.framez.test"
    assert config.api.max_retries == 5
    assert config.sanitizer.tags == {"p", "a"}
    assert config.sanitizer.attributes == {"a": {"href"}}
    assert manager.validate_config()


def test_load_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"storage": {"type": "filesystem", "directory": "out"}}), encoding="utf-8")

    config = ConfigurationManager(str(path)).get_config()
    assert config.storage.type == "filesystem"
    assert config.storage.directory == "out"


def test_unsupported_and_missing_files(tmp_path):
    manager = ConfigurationManager()
    path = tmp_path / "settings.toml"
    path.write_text("x = 1", encoding="utf-8")

    with pytest.raises(ValueError):
        manager.load_from_file(str(path))
    with pytest.raises(FileNotFoundError):
        manager.load_from_file(str(tmp_path / "absent.yaml"))


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("packaging: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid configuration"):
        ConfigurationManager().load_from_file(str(path))


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FRAMEZ_API_SERVER", "env.framez.test")
    monkeypatch.setenv("FRAMEZ_API_TOKEN", "env-token")
    monkeypatch.setenv("FRAMEZ_STORAGE_DIR", "/tmp/packages")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    config = ConfigurationManager().get_config()
    assert config.api.server == "env.framez.test"
    assert config.api.token == "env-token"
    assert config.storage.type == "filesystem"
    assert config.storage.directory == "/tmp/packages"
    assert config.logging.level == "DEBUG"


def test_validation_collects_errors():
    manager = ConfigurationManager()
    manager.config.storage.type = "database"
    manager.config.api.max_retries = 0
    manager.config.packaging.extension = "h5p"

    with pytest.raises(ValueError) as exc_info:
        manager.validate_config()
    message = str(exc_info.value)
    assert "Invalid storage type" in message
    assert "max_retries" in message
    assert "extension" in message


def test_rel_attribute_conflicts_with_link_rel():
    manager = ConfigurationManager()
    manager.config.sanitizer.attributes["a"].add("rel")
    with pytest.raises(ValueError, match="rel"):
        manager.validate_config()

    manager.config.sanitizer.link_rel = None
    assert manager.validate_config()


def test_filesystem_registry_needs_directory():
    manager = ConfigurationManager()
    manager.config.libraries.type = "filesystem"
    with pytest.raises(ValueError, match="Library directory"):
        manager.validate_config()


def test_save_and_reload(tmp_path):
    manager = ConfigurationManager()
    manager.config.packaging.language = "fr"
    path = tmp_path / "nested" / "saved.yaml"
    manager.save_to_file(str(path))

    reloaded = ConfigurationManager(str(path)).get_config()
    assert reloaded.packaging.language == "fr"
    assert reloaded.sanitizer.tags == SanitizerConfig().tags
    assert reloaded.sanitizer.attributes == SanitizerConfig().attributes


def test_reset_and_summary():
    manager = ConfigurationManager()
    manager.update_config(packaging=None, unknown="ignored")
    manager.reset_to_defaults()

    assert isinstance(manager.get_config(), Configuration)
    summary = manager.get_summary()
    assert "H5P.Dialogcards 1.9" in summary
    assert "API Token: not set" in summary
