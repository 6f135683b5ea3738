"""File writes shared by the state cache, manifests and log files.

Readers of the package state cache may run while another process rewrites
it, so every write goes to a sibling temp file first and is swapped in with
``os.replace``. A reader sees either the old artifact or the new one, never a
truncated file.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and its parents) if needed and return it.

    Raises:
        NotADirectoryError: If ``path`` exists as a file.
    """
    directory = Path(path)
    if directory.exists() and not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def atomic_write(
    path: PathLike,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Replace ``path`` with whatever ``write_fn`` writes, all or nothing.

    The temp file lives next to ``path`` so the final rename never crosses a
    filesystem. It is held under an exclusive lock while written and is
    fsync'd before the rename. If ``write_fn`` raises, ``path`` is untouched
    and the temp file is removed.
    """
    target = Path(path)
    ensure_directory(target.parent)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(target.parent),
            prefix=f".{target.name}.",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        os.replace(str(tmp_path), str(target))
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def write_text(path: PathLike, content: str) -> None:
    """Atomically replace ``path`` with UTF-8 ``content``."""
    atomic_write(path, lambda f: f.write(content))


__all__ = [
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "write_text",
]
