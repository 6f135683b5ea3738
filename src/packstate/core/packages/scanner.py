"""Package discovery.

Walks the packages base directory looking for directories that hold a
manifest. Traversal stops at the first manifest on every branch (packages do
not nest), except for collection packages, whose directories are queued and
walked as if they were a new root.

Output order is filesystem order (children sorted by name); it is not the
load order.
"""
from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Set

from packstate.core.exceptions import DiscoveryConflictError

from .classinfo import detect_package_class
from .key import PackageKey
from .manifest import COLLECTION_TYPE, DEFAULT_MANIFEST_FILENAME, Manifest, read_manifest
from .model import PackageRecord, relative_package_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredPackage:
    path: Path
    manifest: Manifest
    key: PackageKey


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def iter_manifest_dirs(
    start: Path,
    manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
    *,
    skip: Iterable[Path] = (),
) -> Iterator[Path]:
    """Yield directories below ``start`` that contain ``manifest_filename``.

    ``start`` itself is never yielded. Directories listed in ``skip`` are
    pruned together with their subtrees. Uses an explicit stack, so deep trees
    do not grow the call stack.
    """
    start = Path(start)
    skipped = {Path(p).resolve() for p in skip}
    visited: Set[Path] = set()
    stack: List[Path] = [start]

    while stack:
        current = stack.pop()
        resolved = current.resolve()
        if resolved in visited:
            continue
        visited.add(resolved)
        try:
            children = sorted(
                (entry for entry in os.scandir(current) if entry.is_dir()),
                key=lambda entry: entry.name,
            )
        except OSError as exc:
            logger.warning("Skipping unreadable directory %s: %s", current, exc)
            continue

        pending: List[Path] = []
        for entry in children:
            child = Path(entry.path)
            if child.resolve() in skipped:
                continue
            if (child / manifest_filename).is_file():
                yield child
            else:
                pending.append(child)
        # Reverse so the alphabetically first subdirectory is walked first.
        stack.extend(reversed(pending))


class PackageScanner:
    """Locate manifests below a base path and detect identity conflicts."""

    def __init__(
        self,
        base_path: Path,
        *,
        manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
        collection_type: str = COLLECTION_TYPE,
        inactive_directory: Optional[str] = "Inactive",
    ) -> None:
        self.base_path = Path(base_path)
        self.manifest_filename = manifest_filename
        self.collection_type = collection_type
        self.inactive_directory = inactive_directory

    @property
    def inactive_path(self) -> Optional[Path]:
        if not self.inactive_directory:
            return None
        return self.base_path / self.inactive_directory

    def scan(self, base_path: Optional[Path] = None) -> List[DiscoveredPackage]:
        """Discover every package below the base path.

        Raises:
            DiscoveryConflictError: If two manifests declare the same external
                name or two packages resolve to the same key (both ignoring case).
            ManifestMalformedError, ManifestIncompleteError, InvalidKeyError:
                On the first structurally invalid package.
        """
        root = Path(base_path) if base_path is not None else self.base_path
        if not root.is_dir():
            logger.info("Packages base path %s does not exist; nothing to scan", root)
            return []

        inactive = self.inactive_path
        skip = [inactive] if inactive is not None else []
        inactive_resolved = inactive.resolve() if inactive is not None else None

        work: Deque[Iterator[Path]] = deque([iter_manifest_dirs(root, self.manifest_filename, skip=skip)])
        by_name: Dict[str, DiscoveredPackage] = {}
        by_key: Dict[str, DiscoveredPackage] = {}
        discovered: List[DiscoveredPackage] = []

        while work:
            for package_path in work.popleft():
                if inactive_resolved is not None and _is_within(package_path.resolve(), inactive_resolved):
                    continue

                manifest = read_manifest(package_path, self.manifest_filename)
                if manifest.is_collection(self.collection_type):
                    logger.debug("Traversing package collection %s", package_path)
                    work.append(iter_manifest_dirs(package_path, self.manifest_filename, skip=skip))
                    continue

                previous = by_name.get(manifest.name.lower())
                if previous is not None:
                    raise DiscoveryConflictError(
                        manifest.name,
                        self._display_path(previous.path),
                        self._display_path(package_path),
                    )

                key = PackageKey.derive_from_manifest_or_path(manifest, package_path)
                clash = by_key.get(key.lowered)
                if clash is not None:
                    raise DiscoveryConflictError(
                        key.value,
                        self._display_path(clash.path),
                        self._display_path(package_path),
                    )

                found = DiscoveredPackage(path=package_path, manifest=manifest, key=key)
                by_name[manifest.name.lower()] = found
                by_key[key.lowered] = found
                discovered.append(found)

        logger.debug("Discovered %d package(s) below %s", len(discovered), root)
        return discovered

    def _display_path(self, path: Path) -> str:
        return relative_package_path(self.base_path, path)


def build_records(base_path: Path, discovered: Iterable[DiscoveredPackage]) -> List[PackageRecord]:
    """Turn discovery results into package records, detecting bootstrap classes."""
    records: List[PackageRecord] = []
    for item in discovered:
        records.append(
            PackageRecord.from_manifest(
                key=item.key,
                base_path=base_path,
                package_path=item.path,
                manifest=item.manifest,
                class_info=detect_package_class(item.path),
            )
        )
    return records


__all__ = [
    "DiscoveredPackage",
    "PackageScanner",
    "iter_manifest_dirs",
    "build_records",
]
