from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from packstate.core.utils.io import ensure_directory

_CONFIGURED_TARGET: str | None = None
_PACKSTATE_HANDLER: logging.Handler | None = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Install the packstate handler on the root logger.

    Logs go to ``log_path`` when given, otherwise to stderr (stdout stays
    clean for command output). Idempotent per-process: reconfiguring with the
    same target only updates the level.
    """
    global _CONFIGURED_TARGET, _PACKSTATE_HANDLER

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    if _CONFIGURED_TARGET == target and _PACKSTATE_HANDLER is not None:
        _PACKSTATE_HANDLER.setLevel(_level_from_name(level))
        return

    if _PACKSTATE_HANDLER is not None:
        root.removeHandler(_PACKSTATE_HANDLER)
        _PACKSTATE_HANDLER.close()
        _PACKSTATE_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        ensure_directory(Path(target).parent)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    _PACKSTATE_HANDLER = handler
    _CONFIGURED_TARGET = target


def reset_logging_for_tests() -> None:
    """Test-only: remove the packstate handler."""
    global _CONFIGURED_TARGET, _PACKSTATE_HANDLER
    if _PACKSTATE_HANDLER is not None:
        logging.getLogger().removeHandler(_PACKSTATE_HANDLER)
        _PACKSTATE_HANDLER.close()
    _CONFIGURED_TARGET = None
    _PACKSTATE_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests", "LOG_FORMAT"]
