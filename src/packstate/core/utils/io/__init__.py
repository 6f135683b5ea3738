"""File I/O for packstate: atomic text writes and YAML layers."""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    write_text,
)
from .yaml import (
    iter_yaml_files,
    read_yaml,
    write_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "write_text",
    # yaml
    "read_yaml",
    "write_yaml",
    "iter_yaml_files",
]
