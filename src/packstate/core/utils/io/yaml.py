"""YAML files: configuration layers and package manifests."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, List

import yaml

from .core import PathLike, atomic_write


def read_yaml(path: PathLike, default: Any = None, raise_on_error: bool = False) -> Any:
    """Load ``path`` under a shared lock.

    A missing, unreadable or empty file yields ``default``. With
    ``raise_on_error`` the underlying ``OSError``/``yaml.YAMLError`` (or
    ``FileNotFoundError`` for a missing file) propagates instead; the config
    loader uses that so a broken layer is never skipped silently.
    """
    source = Path(path)
    if not source.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {source}")
        return default

    try:
        with open(source, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            data = yaml.safe_load(f)
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def write_yaml(path: PathLike, data: Any, *, sort_keys: bool = True) -> None:
    """Atomically write ``data`` as block-style YAML."""
    atomic_write(
        path,
        lambda f: yaml.safe_dump(data, f, default_flow_style=False, sort_keys=sort_keys, allow_unicode=True),
    )


def iter_yaml_files(dir_path: PathLike) -> List[Path]:
    """``*.yml`` and ``*.yaml`` files directly in ``dir_path``, sorted by name.

    Layers are applied in this order, so ``10-base.yml`` loses to ``20-site.yml``.
    """
    directory = Path(dir_path)
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix in {".yml", ".yaml"}),
        key=lambda p: p.name,
    )


__all__ = [
    "read_yaml",
    "write_yaml",
    "iter_yaml_files",
]
