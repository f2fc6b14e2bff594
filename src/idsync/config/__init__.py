"""Application configuration helpers."""

from __future__ import annotations

from .directory import DirectoryConfig, get_directory_config
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .notification import SmtpConfig, get_smtp_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, Thresholds, get_sync_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "DirectoryConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SmtpConfig",
    "StorageConfig",
    "SyncConfig",
    "Thresholds",
    "configure_logging",
    "get_database_config",
    "get_directory_config",
    "get_smtp_config",
    "get_storage_config",
    "get_sync_config",
    "require_env_vars",
]
