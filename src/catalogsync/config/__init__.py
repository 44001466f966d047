"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .images import (
    DriveConfig,
    ImageGenerationConfig,
    get_drive_config,
    get_image_generation_config,
)
from .logging import configure_logging
from .notion import NotionConfig, get_notion_config
from .reconcile import ReconcileConfig, get_reconcile_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .stripe import StripeConfig, get_stripe_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DriveConfig",
    "ImageGenerationConfig",
    "MissingConfigurationError",
    "NotionConfig",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "StripeConfig",
    "configure_logging",
    "get_database_config",
    "get_drive_config",
    "get_image_generation_config",
    "get_notion_config",
    "get_reconcile_config",
    "get_storage_config",
    "get_stripe_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
