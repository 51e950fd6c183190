"""Configuration loading for the Framez page builder."""

from .configuration_manager import (
    ConfigurationManager,
    Configuration,
    SanitizerConfig,
    PackagingConfig,
    LibraryConfig,
    StorageConfig,
    APIConfig,
    LoggingConfig
)

__all__ = [
    "ConfigurationManager",
    "Configuration",
    "SanitizerConfig",
    "PackagingConfig",
    "LibraryConfig",
    "StorageConfig",
    "APIConfig",
    "LoggingConfig"
]
