"""Configuration management for the Framez page builder."""

import os
import yaml
import json
from typing import Dict, Any, Optional, List, Set
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv


def _default_tags() -> Set[str]:
    return {
        "a", "blockquote", "br", "code", "del", "div", "em", "h1", "h2", "h3",
        "h4", "h5", "h6", "hr", "li", "ol", "p", "pre", "strong", "ul"
    }


def _default_attributes() -> Dict[str, Set[str]]:
    return {
        "*": {"class"},
        "a": {"href", "title", "target"},
        "div": {"contenteditable"}
    }


@dataclass
class SanitizerConfig:
    """Allow-list used by the HTML sanitizer."""
    tags: Set[str] = field(default_factory=_default_tags)
    attributes: Dict[str, Set[str]] = field(default_factory=_default_attributes)
    url_schemes: Set[str] = field(default_factory=lambda: {"http", "https", "mailto"})
    link_rel: Optional[str] = "noopener noreferrer"
    strip_comments: bool = True

    def __post_init__(self):
        # YAML and JSON hand us lists
        self.tags = set(self.tags)
        self.attributes = {tag: set(attrs) for tag, attrs in self.attributes.items()}
        self.url_schemes = set(self.url_schemes)


@dataclass
class PackagingConfig:
    """Card deck packaging configuration."""
    library: str = "H5P.Dialogcards"
    major_version: int = 1
    minor_version: int = 9
    language: str = "en"
    fallback_title: str = "Dialog Cards"
    filename_fallback: str = "h5p_content"
    extension: str = ".h5p"
    manifest_entry: str = "h5p.json"
    content_entry: str = "content/content.json"
    scratch_directory: Optional[str] = None


@dataclass
class LibraryConfig:
    """Content-type library registry configuration."""
    type: str = "memory"  # memory, filesystem
    directory: Optional[str] = None
    installed: List[str] = field(default_factory=list)


@dataclass
class StorageConfig:
    """Content storage configuration."""
    type: str = "memory"  # memory, filesystem
    directory: str = "./h5p_packages"


@dataclass
class APIConfig:
    """Remote session API configuration."""
    server: str = ""
    token: Optional[str] = None
    client_id: Optional[str] = None
    timeout: float = 60.0
    namespaces_timeout: float = 10.0
    max_retries: int = 3
    retry_backoff: float = 1.0
    verify_ssl: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class Configuration:
    """Main configuration class."""
    sanitizer: SanitizerConfig = None
    packaging: PackagingConfig = None
    libraries: LibraryConfig = None
    storage: StorageConfig = None
    api: APIConfig = None
    logging: LoggingConfig = None

    def __post_init__(self):
        if self.sanitizer is None:
            self.sanitizer = SanitizerConfig()
        if self.packaging is None:
            self.packaging = PackagingConfig()
        if self.libraries is None:
            self.libraries = LibraryConfig()
        if self.storage is None:
            self.storage = StorageConfig()
        if self.api is None:
            self.api = APIConfig()
        if self.logging is None:
            self.logging = LoggingConfig()


class ConfigurationManager:
    """Manages configuration loading, validation, and persistence."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default.
        """
        self.config_path = config_path or "config/default.yaml"
        self.config = Configuration()

        load_dotenv()

        if os.path.exists(self.config_path):
            self.load_from_file(self.config_path)

        self._load_from_environment()

    def load_from_file(self, path: str) -> None:
        """Load configuration from YAML or JSON file.

        Args:
            path: Path to configuration file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.endswith('.yaml') or path.endswith('.yml'):
                    data = yaml.safe_load(f)
                elif path.endswith('.json'):
                    data = json.load(f)
                else:
                    raise ValueError(f"Unsupported configuration file format: {path}")

            self._update_config_from_dict(data or {})
            self.config_path = path

        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid configuration file format: {e}")

    def save_to_file(self, path: str) -> None:
        """Save configuration to YAML or JSON file.

        Args:
            path: Path where to save configuration.
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        config_dict = self._to_plain(asdict(self.config))

        with open(path, 'w', encoding='utf-8') as f:
            if path.endswith('.yaml') or path.endswith('.yml'):
                yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2)
            elif path.endswith('.json'):
                json.dump(config_dict, f, indent=2)
            else:
                raise ValueError(f"Unsupported configuration file format: {path}")

    @classmethod
    def _to_plain(cls, value: Any) -> Any:
        """Turn sets into sorted lists so YAML and JSON can hold them."""
        if isinstance(value, dict):
            return {k: cls._to_plain(v) for k, v in value.items()}
        if isinstance(value, (set, frozenset)):
            return sorted(value)
        if isinstance(value, list):
            return [cls._to_plain(v) for v in value]
        return value

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        # Session API
        if os.getenv('FRAMEZ_API_SERVER'):
            self.config.api.server = os.getenv('FRAMEZ_API_SERVER')
        if os.getenv('FRAMEZ_API_TOKEN'):
            self.config.api.token = os.getenv('FRAMEZ_API_TOKEN')
        if os.getenv('FRAMEZ_CLIENT_ID'):
            self.config.api.client_id = os.getenv('FRAMEZ_CLIENT_ID')

        # Storage
        if os.getenv('FRAMEZ_STORAGE_DIR'):
            self.config.storage.type = "filesystem"
            self.config.storage.directory = os.getenv('FRAMEZ_STORAGE_DIR')

        # Logging
        if os.getenv('LOG_LEVEL'):
            self.config.logging.level = os.getenv('LOG_LEVEL')

    def _update_config_from_dict(self, data: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        if 'sanitizer' in data:
            self.config.sanitizer = SanitizerConfig(**data['sanitizer'])

        if 'packaging' in data:
            self.config.packaging = PackagingConfig(**data['packaging'])

        if 'libraries' in data:
            self.config.libraries = LibraryConfig(**data['libraries'])

        if 'storage' in data:
            self.config.storage = StorageConfig(**data['storage'])

        if 'api' in data:
            self.config.api = APIConfig(**data['api'])

        if 'logging' in data:
            self.config.logging = LoggingConfig(**data['logging'])

    def validate_config(self) -> bool:
        """Validate configuration settings.

        Returns:
            True if configuration is valid.

        Raises:
            ValueError: If configuration is invalid with detailed error message.
        """
        errors = []

        # Sanitizer
        if not self.config.sanitizer.tags:
            errors.append("Sanitizer must allow at least one tag")
        if self.config.sanitizer.link_rel and "rel" in self.config.sanitizer.attributes.get("a", set()):
            errors.append("Sanitizer cannot allow the 'rel' attribute while enforcing link_rel")

        # Packaging
        if not self.config.packaging.library:
            errors.append("Packaging library machine name is required")
        if self.config.packaging.major_version < 0 or self.config.packaging.minor_version < 0:
            errors.append("Packaging library version must not be negative")
        if not self.config.packaging.extension.startswith("."):
            errors.append("Packaging extension must start with '.'")
        if "/" in self.config.packaging.manifest_entry:
            errors.append("Manifest entry must sit at the archive root")

        # Libraries
        valid_registries = ["memory", "filesystem"]
        if self.config.libraries.type not in valid_registries:
            errors.append(f"Invalid library registry type. Must be one of: {valid_registries}")
        if self.config.libraries.type == "filesystem" and not self.config.libraries.directory:
            errors.append("Library directory is required when using filesystem registry")

        # Storage
        valid_storage = ["memory", "filesystem"]
        if self.config.storage.type not in valid_storage:
            errors.append(f"Invalid storage type. Must be one of: {valid_storage}")

        # API
        if self.config.api.timeout <= 0 or self.config.api.namespaces_timeout <= 0:
            errors.append("API timeouts must be positive")
        if self.config.api.max_retries < 1:
            errors.append("API max_retries must be at least 1")

        if errors:
            raise ValueError("Configuration validation failed:\n" + "\n".join(f"- {error}" for error in errors))

        return True

    def get_config(self) -> Configuration:
        """Get current configuration.

        Returns:
            Current configuration object.
        """
        return self.config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values.

        Args:
            **kwargs: Configuration values to update.
        """
        for key, value in kwargs.items():
            if hasattr(self.config, key):
                setattr(self.config, key, value)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = Configuration()
        self._load_from_environment()

    def get_summary(self) -> str:
        """Get configuration summary as string.

        Returns:
            Human-readable configuration summary.
        """
        packaging = self.config.packaging
        summary = []
        summary.append("Framez Page Builder Configuration")
        summary.append("=" * 40)
        summary.append(f"Card Library: {packaging.library} {packaging.major_version}.{packaging.minor_version}")
        summary.append(f"Library Registry: {self.config.libraries.type}")
        summary.append(f"Content Storage: {self.config.storage.type}")
        summary.append(f"API Server: {self.config.api.server or '(not set)'}")
        summary.append(f"API Token: {'set' if self.config.api.token else 'not set'}")
        summary.append(f"Allowed Tags: {len(self.config.sanitizer.tags)}")

        return "\n".join(summary)
