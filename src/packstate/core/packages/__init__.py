"""Package discovery, dependency ordering and the package state cache."""
from __future__ import annotations

from .classinfo import PACKAGE_CLASS_FILE, PACKAGE_CLASS_NAME, detect_package_class, load_package_class
from .key import PACKAGE_KEY_PATTERN, PackageKey, default_external_name, derive_key_string
from .manager import PackageManager
from .manifest import (
    COLLECTION_TYPE,
    DEFAULT_MANIFEST_FILENAME,
    DEFAULT_PACKAGE_TYPE,
    Manifest,
    manifest_from_mapping,
    read_manifest,
    write_manifest,
)
from .model import PackageCapability, PackageRecord, PackageState
from .ordering import DependencyGraph, build_graph, order_packages, sort_records
from .scanner import DiscoveredPackage, PackageScanner, build_records, iter_manifest_dirs
from .state import FORMAT_VERSION, BytecodeCacheInvalidator, StateStore

__all__ = [
    "PACKAGE_CLASS_FILE",
    "PACKAGE_CLASS_NAME",
    "detect_package_class",
    "load_package_class",
    "PACKAGE_KEY_PATTERN",
    "PackageKey",
    "default_external_name",
    "derive_key_string",
    "PackageManager",
    "COLLECTION_TYPE",
    "DEFAULT_MANIFEST_FILENAME",
    "DEFAULT_PACKAGE_TYPE",
    "Manifest",
    "manifest_from_mapping",
    "read_manifest",
    "write_manifest",
    "PackageCapability",
    "PackageRecord",
    "PackageState",
    "DependencyGraph",
    "build_graph",
    "order_packages",
    "sort_records",
    "DiscoveredPackage",
    "PackageScanner",
    "build_records",
    "iter_manifest_dirs",
    "FORMAT_VERSION",
    "BytecodeCacheInvalidator",
    "StateStore",
]
