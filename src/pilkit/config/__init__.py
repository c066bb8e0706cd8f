"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .ledger import LedgerConfig, get_ledger_config, get_licensing_options
from .logging import configure_logging

__all__ = [
    "NO_RETRY",
    "ConfigurationError",
    "LedgerConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_ledger_config",
    "get_licensing_options",
    "require_env_vars",
]
