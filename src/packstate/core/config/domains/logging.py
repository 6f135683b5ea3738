"""Domain-specific configuration for packstate logging."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level", "WARNING")).upper()

    @cached_property
    def log_path(self) -> Optional[Path]:
        value = self.section.get("file")
        return self._resolve_path(str(value)) if value else None


__all__ = ["LoggingConfig"]
