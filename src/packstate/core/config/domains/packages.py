"""Domain-specific configuration for package discovery and the state cache.

Provides cached access to the ``packages`` section without requiring direct
ConfigManager usage throughout the codebase.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Dict, Optional

from ..base import BaseDomainConfig


class PackagesConfig(BaseDomainConfig):
    """Domain-specific configuration accessor for packages.

    Usage:
        packages = PackagesConfig(repo_root=Path("/path/to/project"))
        packages.base_path        # /path/to/project/Packages
        packages.state_cache_path # /path/to/project/.packstate/cache/PackageStates.py
    """

    def _config_section(self) -> str:
        return "packages"

    @cached_property
    def base_path(self) -> Path:
        return self._resolve_path(str(self.section.get("basePath", "Packages")))

    @cached_property
    def manifest_filename(self) -> str:
        return str(self.section.get("manifestFilename", "package.yml"))

    @cached_property
    def collection_type(self) -> str:
        return str(self.section.get("collectionType", "package-collection"))

    @cached_property
    def inactive_directory(self) -> Optional[str]:
        value = self.section.get("inactiveDirectory", "Inactive")
        return str(value) if value else None

    @cached_property
    def default_type(self) -> str:
        return str(self.section.get("defaultType", "packstate-package"))

    @cached_property
    def default_packages_path(self) -> str:
        return str(self.section.get("defaultPackagesPath", "Application"))

    @cached_property
    def packages_path_by_type(self) -> Dict[str, str]:
        mapping = self.section.get("packagesPathByType") or {}
        return {str(k): str(v) for k, v in mapping.items()}

    @cached_property
    def state_cache_path(self) -> Path:
        cache = self.section.get("stateCache") or {}
        return self._resolve_path(str(cache.get("path", ".packstate/cache/PackageStates.py")))

    @cached_property
    def legacy_state_cache_path(self) -> Optional[Path]:
        cache = self.section.get("stateCache") or {}
        legacy = cache.get("legacyPath")
        return self._resolve_path(str(legacy)) if legacy else None


__all__ = ["PackagesConfig"]
