"""Typed accessors for configuration sections."""
from __future__ import annotations

from .logging import LoggingConfig
from .packages import PackagesConfig

__all__ = ["LoggingConfig", "PackagesConfig"]
