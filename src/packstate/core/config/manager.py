"""
packstate configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from packstate.core.exceptions import ConfigError, SchemaValidationError
from packstate.core.schemas import validate_payload
from packstate.core.utils.io import iter_yaml_files, read_yaml
from packstate.core.utils.merge import deep_merge
from packstate.core.utils.paths import get_project_config_dir, resolve_project_root
from packstate.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "PACKSTATE_"
# Variables under the prefix that are not configuration overrides.
_RESERVED_ENV_KEYS = frozenset({"PACKSTATE_PROJECT_ROOT"})


class ConfigManager:
    """Load, merge, and validate packstate configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: PACKSTATE_<section>__<key>
    2. Project config: <repo>/.packstate/config/*.yml (alphabetical order)
    3. Bundled defaults: packstate.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else resolve_project_root()
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path in iter_yaml_files(directory):
            try:
                # Fail closed: configuration must never silently ignore invalid YAML.
                data = read_yaml(path, default={}, raise_on_error=True)
            except Exception as exc:
                raise ConfigError(
                    f"Could not parse configuration file {path}: {exc}",
                    context={"path": str(path)},
                ) from exc
            if not isinstance(data, dict):
                raise ConfigError(
                    f"Configuration file {path} must contain a mapping",
                    context={"path": str(path)},
                )
            cfg = deep_merge(cfg, data)
        return cfg

    # ========== Environment overrides ==========

    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if low in {"null", "none"}:
            return None
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV_KEYS:
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.split("__")
            if not raw or any(seg == "" for seg in segments):
                logger.warning("Ignoring malformed configuration override %s", key)
                continue
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for i, part in enumerate(path):
            if not isinstance(cur, dict):
                raise ConfigError(
                    f"Environment override {ENV_PREFIX}{'__'.join(path)} traverses a non-mapping value",
                )
            # Case-insensitive match against existing keys keeps camelCase keys canonical.
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            use_key = existing.get(part.lower(), part)
            if i == len(path) - 1:
                cur[use_key] = value
                return
            if use_key not in cur or cur[use_key] is None:
                cur[use_key] = {}
            cur = cur[use_key]

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            self._set_nested(cfg, path, value)

    # ========== Public API ==========

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load the merged configuration.

        Raises:
            ConfigError: If a layer cannot be parsed or validation fails.
        """
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)

        if validate:
            try:
                validate_payload(cfg, "config.schema")
            except SchemaValidationError as exc:
                raise ConfigError(str(exc), context=exc.context) from exc
        return cfg


__all__ = ["ConfigManager", "ENV_PREFIX"]
