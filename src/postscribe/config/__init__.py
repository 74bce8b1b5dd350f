"""Application configuration helpers.

``postscribe.config.reconcile`` depends on domain types and is imported
directly rather than re-exported here.
"""

from __future__ import annotations

from .env import int_env_var, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import LoggingConfig, configure_logging, get_logging_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .summarizer import HttpClientConfig, RateLimit, SummarizerConfig, get_summarizer_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "HttpClientConfig",
    "LoggingConfig",
    "MissingConfigurationError",
    "RateLimit",
    "StorageConfig",
    "SummarizerConfig",
    "configure_logging",
    "get_database_config",
    "get_logging_config",
    "get_storage_config",
    "get_summarizer_config",
    "int_env_var",
    "optional_env_var",
    "require_env_vars",
]
