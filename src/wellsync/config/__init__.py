"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .platform_api import (
    ApiCredentials,
    PlatformApiConfig,
    PlatformApiEndpoints,
    build_platform_api_resilience,
    get_platform_api_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "NO_RETRY",
    "ApiCredentials",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PlatformApiConfig",
    "PlatformApiEndpoints",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "build_platform_api_resilience",
    "configure_logging",
    "get_database_config",
    "get_platform_api_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
