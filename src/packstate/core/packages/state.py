"""Persisted package states.

The cache artifact is a Python module holding two literal assignments,
``version`` and ``packages``. Loading it is a plain module execution through
importlib (which also lets the interpreter's bytecode cache skip parsing on
the next start), so there is no deserializer on the warm path.

Anything that goes wrong while loading is treated as "no cached state": the
caller rescans and writes a fresh artifact.
"""
from __future__ import annotations

import importlib
import importlib.util
import logging
import pprint
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from packstate.core.events import PACKAGE_STATES_UPDATED, SignalDispatcher
from packstate.core.exceptions import NotWritableError
from packstate.core.utils.io import write_text

from .model import PackageState

logger = logging.getLogger(__name__)

# Bump whenever the shape of a package-state entry changes.
FORMAT_VERSION = 1

_HEADER = """\
# PackageStates.py
#
# This file is maintained by packstate's package management. You shouldn't
# edit it manually; use the "packstate package" commands instead.
#
# It is regenerated automatically if it doesn't exist or was written by an
# older format version. Deleting it only costs one package rescan.
"""


class CompiledCodeCache(Protocol):
    def invalidate(self, path: Path) -> None: ...


class BytecodeCacheInvalidator:
    """Drop the interpreter's cached bytecode for a rewritten source file.

    Bytecode freshness is checked by source mtime (whole seconds) and size, so
    two writes within the same second with equal size would otherwise be
    served from the stale ``.pyc``.
    """

    def invalidate(self, path: Path) -> None:
        try:
            cached = Path(importlib.util.cache_from_source(str(path)))
        except NotImplementedError:
            return
        try:
            cached.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove bytecode cache %s: %s", cached, exc)
        importlib.invalidate_caches()


def render_state_module(payload: Dict[str, Any]) -> str:
    """Render the artifact source for ``payload`` (``{version, packages}``)."""
    packages = pprint.pformat(payload["packages"], indent=1, width=100, sort_dicts=False)
    return f"{_HEADER}\nversion = {int(payload['version'])!r}\n\npackages = {packages}\n"


class StateStore:
    """Load and save the package state cache artifact."""

    def __init__(
        self,
        path: Path,
        *,
        legacy_path: Optional[Path] = None,
        dispatcher: Optional[SignalDispatcher] = None,
        code_cache: Optional[CompiledCodeCache] = None,
        format_version: int = FORMAT_VERSION,
    ) -> None:
        self.path = Path(path)
        self.legacy_path = Path(legacy_path) if legacy_path is not None else None
        self.dispatcher = dispatcher
        self.code_cache: CompiledCodeCache = code_cache or BytecodeCacheInvalidator()
        self.format_version = format_version

    def _execute(self) -> Dict[str, Any]:
        spec = importlib.util.spec_from_file_location("_packstate_package_states", self.path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot build a module spec for {self.path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return {"version": getattr(module, "version"), "packages": getattr(module, "packages")}

    def load(self) -> Optional[PackageState]:
        """Return the cached state, or None when it is missing, unreadable or stale."""
        if not self.path.is_file():
            logger.debug("No package state cache at %s", self.path)
            return None

        try:
            payload = self._execute()
            state = PackageState.from_payload(payload)
        except Exception as exc:
            # Corrupt, half-written or hand-edited artifacts all mean "rebuild".
            logger.warning("Ignoring unreadable package state cache %s: %s", self.path, exc)
            return None

        if state.version != self.format_version:
            logger.info(
                "Package state cache %s has format version %s (expected %s); rebuilding",
                self.path,
                state.version,
                self.format_version,
            )
            return None
        return state

    def save(self, state: PackageState) -> PackageState:
        """Write ``state`` stamped with the current format version.

        Returns:
            The stamped state that was written.

        Raises:
            NotWritableError: If the artifact cannot be written.
        """
        stamped = PackageState(packages=dict(state.packages), version=self.format_version)
        source = render_state_module(stamped.to_payload())
        try:
            write_text(self.path, source)
        except OSError as exc:
            raise NotWritableError(self.path, str(exc)) from exc

        self._remove_legacy_artifact()
        self.code_cache.invalidate(self.path)
        logger.info("Wrote package states for %d package(s) to %s", len(stamped.packages), self.path)

        if self.dispatcher is not None:
            self.dispatcher.dispatch(PACKAGE_STATES_UPDATED, stamped)
        return stamped

    def _remove_legacy_artifact(self) -> None:
        legacy = self.legacy_path
        if legacy is None or legacy == self.path or not legacy.is_file():
            return
        try:
            legacy.unlink()
        except OSError:
            # Another process may have removed it first.
            pass


__all__ = [
    "FORMAT_VERSION",
    "CompiledCodeCache",
    "BytecodeCacheInvalidator",
    "StateStore",
    "render_state_module",
]
