"""Application configuration helpers."""

from __future__ import annotations

from .demo_api import DEFAULT_ENDPOINTS, DemoApiConfig, get_demo_api_config
from .env import optional_float_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, data_dir, get_database_config

__all__ = [
    "DEFAULT_ENDPOINTS",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DemoApiConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "data_dir",
    "get_database_config",
    "get_demo_api_config",
    "optional_float_env",
    "require_env_vars",
]
