"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .server import DiffServerConfig, get_diff_server_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .view import ViewConfig, get_view_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "DiffServerConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "ViewConfig",
    "configure_logging",
    "get_database_config",
    "get_diff_server_config",
    "get_storage_config",
    "get_view_config",
    "int_env_var",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
