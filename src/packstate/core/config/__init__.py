"""packstate configuration.

Layered YAML configuration (bundled defaults, project overrides, environment
overrides) with centralized caching and typed per-section accessors.
"""
from __future__ import annotations

from packstate.core.schemas.validation import load_schema

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached, register_cache_clearer
from .domains import LoggingConfig, PackagesConfig
from .manager import ConfigManager

register_cache_clearer("schemas", load_schema.cache_clear)

__all__ = [
    "BaseDomainConfig",
    "ConfigManager",
    "LoggingConfig",
    "PackagesConfig",
    "clear_all_caches",
    "get_cached_config",
    "is_cached",
    "register_cache_clearer",
]
