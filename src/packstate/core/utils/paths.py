"""Project root and project config directory resolution.

Resolution priority for the project root:
1. ``PACKSTATE_PROJECT_ROOT`` environment variable
2. Nearest ancestor of the working directory holding ``.packstate/`` or ``.git/``
3. The working directory itself
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from packstate.core.exceptions import ConfigError

PROJECT_ROOT_ENV = "PACKSTATE_PROJECT_ROOT"
PROJECT_CONFIG_DIRNAME = ".packstate"

_ROOT_MARKERS = (PROJECT_CONFIG_DIRNAME, ".git")


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """Resolve the project root.

    Raises:
        ConfigError: If ``PACKSTATE_PROJECT_ROOT`` points at a missing path
            or at the ``.packstate`` directory itself.
    """
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ConfigError(
                f"{PROJECT_ROOT_ENV} points at missing path: {env_path}",
                context={"path": str(env_path)},
            )
        if env_path.name == PROJECT_CONFIG_DIRNAME:
            raise ConfigError(
                f"{PROJECT_ROOT_ENV} points to the {PROJECT_CONFIG_DIRNAME} directory: {env_path}. "
                "It must point to the project root.",
                context={"path": str(env_path)},
            )
        return env_path

    cwd = (start or Path.cwd()).resolve()
    for candidate in (cwd, *cwd.parents):
        if any((candidate / marker).is_dir() for marker in _ROOT_MARKERS):
            return candidate
    return cwd


def get_project_config_dir(repo_root: Path, *, create: bool = False) -> Path:
    """Return ``<repo_root>/.packstate``, optionally creating it."""
    path = Path(repo_root) / PROJECT_CONFIG_DIRNAME
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = [
    "PROJECT_ROOT_ENV",
    "PROJECT_CONFIG_DIRNAME",
    "resolve_project_root",
    "get_project_config_dir",
]
