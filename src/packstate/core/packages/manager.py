"""Package manager: discovery, ordering and state caching in one place.

On initialization the manager loads the cached package states (warm start)
or, if there are none or they are stale, scans the packages base path, orders
the result by dependencies and writes a new cache (cold start). Lookups are
served from the in-memory registry built from that state.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from packstate.core.events import SignalDispatcher
from packstate.core.exceptions import (
    ExternalNameAlreadyExistsError,
    InvalidPackageStateError,
    KeyAlreadyExistsError,
    NotWritableError,
    PackstateError,
    UnknownPackageError,
)

from .classinfo import load_package_class
from .key import PackageKey
from .manifest import (
    DEFAULT_PACKAGE_TYPE,
    manifest_from_mapping,
    new_manifest_document,
    read_manifest,
    write_manifest,
)
from .model import PackageCapability, PackageRecord, PackageState
from .ordering import sort_records
from .scanner import PackageScanner, build_records
from .state import StateStore

logger = logging.getLogger(__name__)

DIRECTORY_CLASSES = "Classes"
DIRECTORY_CONFIGURATION = "Configuration"
DIRECTORY_RESOURCES = "Resources"
DIRECTORY_TESTS_UNIT = "Tests/Unit"
DIRECTORY_TESTS_FUNCTIONAL = "Tests/Functional"

SKELETON_DIRECTORIES = (
    DIRECTORY_CLASSES,
    DIRECTORY_CONFIGURATION,
    DIRECTORY_RESOURCES,
    DIRECTORY_TESTS_UNIT,
    DIRECTORY_TESTS_FUNCTIONAL,
)

PACKAGE_STATE_AVAILABLE = "available"


class PackageManager:
    """Registry of the locally available packages, in load order.

    Usage:
        manager = PackageManager.from_config(repo_root)
        manager.initialize()
        manager.get_package("acme.foo")  # -> PackageRecord for "Acme.Foo"
    """

    def __init__(
        self,
        scanner: PackageScanner,
        store: StateStore,
        *,
        dispatcher: Optional[SignalDispatcher] = None,
        default_type: str = DEFAULT_PACKAGE_TYPE,
        default_packages_path: str = "Application",
        packages_path_by_type: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.scanner = scanner
        self.store = store
        self.dispatcher = dispatcher or store.dispatcher or SignalDispatcher()
        if store.dispatcher is None:
            store.dispatcher = self.dispatcher
        self.default_type = default_type
        self.default_packages_path = default_packages_path
        self.packages_path_by_type = dict(packages_path_by_type or {})

        self._state: Optional[PackageState] = None
        self._packages: Dict[str, PackageRecord] = {}
        self._package_keys: Dict[str, str] = {}
        self._external_name_to_key: Dict[str, str] = {}
        self._framework_packages: Dict[str, PackageRecord] = {}
        self.last_save_error: Optional[NotWritableError] = None

    @classmethod
    def from_config(
        cls,
        repo_root: Optional[Path] = None,
        *,
        dispatcher: Optional[SignalDispatcher] = None,
    ) -> "PackageManager":
        """Build a manager wired from the ``packages`` configuration section."""
        from packstate.core.config import PackagesConfig

        cfg = PackagesConfig(repo_root=repo_root)
        scanner = PackageScanner(
            cfg.base_path,
            manifest_filename=cfg.manifest_filename,
            collection_type=cfg.collection_type,
            inactive_directory=cfg.inactive_directory,
        )
        store = StateStore(
            cfg.state_cache_path,
            legacy_path=cfg.legacy_state_cache_path,
            dispatcher=dispatcher,
        )
        return cls(
            scanner,
            store,
            dispatcher=dispatcher,
            default_type=cfg.default_type,
            default_packages_path=cfg.default_packages_path,
            packages_path_by_type=cfg.packages_path_by_type,
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------

    @property
    def packages_base_path(self) -> Path:
        return self.scanner.base_path

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    def initialize(self, bootstrap: Any = None) -> PackageState:
        """Load (or rebuild) package states, register them and boot bootable packages."""
        state = self._get_current_states()
        self._register(state)
        if bootstrap is not None:
            self.boot_packages(bootstrap)
        return state

    def boot_packages(self, bootstrap: Any) -> List[str]:
        """Instantiate and boot every bootable package, in load order.

        Returns:
            Keys of the booted packages.
        """
        booted: List[str] = []
        for record in self._packages.values():
            if record.capability is not PackageCapability.BOOTABLE:
                continue
            package_class = load_package_class(record.absolute_path(self.packages_base_path), record.class_info or {})
            package_class(record).boot(bootstrap)
            booted.append(record.key.value)
        logger.debug("Booted %d package(s)", len(booted))
        return booted

    def rescan_packages(self) -> PackageState:
        """Rescan, order and persist package states regardless of the cache."""
        state = self._sort_and_save(self._scan_available_packages())
        self._register(state)
        return state

    def _get_current_states(self) -> PackageState:
        state = self.store.load()
        if state is not None:
            logger.debug("Loaded %d package state(s) from %s", len(state.packages), self.store.path)
            return state
        logger.info("No valid package state cache; scanning %s", self.packages_base_path)
        return self._sort_and_save(self._scan_available_packages())

    def _scan_available_packages(self) -> List[PackageRecord]:
        discovered = self.scanner.scan()
        return build_records(self.packages_base_path, discovered)

    def _sort_and_save(self, records: List[PackageRecord]) -> PackageState:
        ordered = PackageState.from_records(sort_records(records), version=self.store.format_version)
        try:
            ordered = self.store.save(ordered)
            self.last_save_error = None
        except NotWritableError as exc:
            # The ordered state is still valid for this process; the next
            # start pays for a rescan again.
            logger.error("%s", exc)
            self.last_save_error = exc
        return ordered

    def _register(self, state: PackageState) -> None:
        packages: Dict[str, PackageRecord] = {}
        package_keys: Dict[str, str] = {}
        external: Dict[str, str] = {}
        framework: Dict[str, PackageRecord] = {}
        for record in state.packages.values():
            key = record.key.value
            packages[key] = record
            package_keys[key.lower()] = key
            external[record.external_name.lower()] = key
            if record.capability is not PackageCapability.PLAIN:
                framework[key] = record

        self._state = state
        self._packages = packages
        self._package_keys = package_keys
        self._external_name_to_key = external
        self._framework_packages = framework

    def _ensure_initialized(self) -> None:
        if self._state is None:
            self.initialize()

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------

    @property
    def package_states(self) -> PackageState:
        self._ensure_initialized()
        assert self._state is not None
        return self._state

    def get_case_sensitive_package_key(self, key: Union[str, PackageKey]) -> Optional[str]:
        self._ensure_initialized()
        return self._package_keys.get(str(key).lower())

    def is_available(self, key: Union[str, PackageKey]) -> bool:
        try:
            return self.get_case_sensitive_package_key(key) is not None
        except PackstateError:
            logger.exception("Package availability check for %s failed", key)
            return False

    def get_package(self, key: Union[str, PackageKey]) -> PackageRecord:
        canonical = self.get_case_sensitive_package_key(key)
        if canonical is None:
            raise UnknownPackageError(str(key))
        return self._packages[canonical]

    def get_available_packages(self) -> Dict[str, PackageRecord]:
        """Snapshot of all packages keyed by package key, in load order."""
        self._ensure_initialized()
        return dict(self._packages)

    def get_framework_packages(self) -> Dict[str, PackageRecord]:
        """Packages that ship a bootstrap class, keyed by package key."""
        self._ensure_initialized()
        return dict(self._framework_packages)

    def get_filtered_packages(
        self,
        package_state: str = PACKAGE_STATE_AVAILABLE,
        package_type: Optional[str] = None,
    ) -> Dict[str, PackageRecord]:
        state = str(package_state).lower()
        if state == "frozen":
            raise InvalidPackageStateError(
                'The package state "frozen" has been removed',
                context={"state": package_state},
            )
        if state != PACKAGE_STATE_AVAILABLE:
            raise InvalidPackageStateError(
                f'The package state "{package_state}" is invalid',
                context={"state": package_state},
            )

        packages = self.get_available_packages()
        if package_type is None:
            return packages

        filtered: Dict[str, PackageRecord] = {}
        for key, record in packages.items():
            manifest = read_manifest(record.absolute_path(self.packages_base_path), self.scanner.manifest_filename)
            if (manifest.type or self.default_type) == package_type:
                filtered[key] = record
        return filtered

    def get_package_key_from_external_name(self, external_name: str) -> str:
        self._ensure_initialized()
        key = self._external_name_to_key.get(external_name.lower())
        if key is None:
            raise InvalidPackageStateError(
                f'Could not find package with external name "{external_name.lower()}" in package states.',
                context={"externalName": external_name},
            )
        return key

    @staticmethod
    def is_package_key_valid(key: str) -> bool:
        return PackageKey.is_valid(key)

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------

    def _target_packages_path(self, package_type: str, packages_path: Optional[Union[str, Path]]) -> Path:
        if packages_path is not None:
            path = Path(packages_path)
            return path if path.is_absolute() else self.packages_base_path / path
        relative = self.packages_path_by_type.get(package_type, self.default_packages_path)
        return self.packages_base_path / relative

    def create_package(
        self,
        key: Union[str, PackageKey],
        manifest: Optional[Mapping[str, Any]] = None,
        packages_path: Optional[Union[str, Path]] = None,
    ) -> PackageRecord:
        """Create a package skeleton and rescan so it is registered immediately.

        Raises:
            InvalidKeyError: If ``key`` is not a valid package key.
            KeyAlreadyExistsError: If a package with that key (any case) exists.
            ExternalNameAlreadyExistsError: If the new package's external name is taken.
            ManifestMalformedError: If the manifest overrides are not a valid manifest.
            NotWritableError: If the skeleton or manifest cannot be written.
        """
        package_key = PackageKey.from_string(key)
        if self.is_available(package_key.value):
            raise KeyAlreadyExistsError(package_key.value)

        overrides: Dict[str, Any] = dict(manifest or {})
        overrides.setdefault("type", self.default_type)
        package_path = self._target_packages_path(str(overrides["type"]), packages_path) / package_key.value
        document = new_manifest_document(package_key, overrides, default_type=self.default_type)
        planned = manifest_from_mapping(document, source=package_path / self.scanner.manifest_filename)
        owner = self._external_name_to_key.get(planned.name.lower())
        if owner is not None:
            raise ExternalNameAlreadyExistsError(planned.name, owner)

        try:
            for directory in SKELETON_DIRECTORIES:
                (package_path / directory).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise NotWritableError(package_path, str(exc)) from exc

        written = write_manifest(
            package_path,
            package_key,
            document,
            filename=self.scanner.manifest_filename,
            default_type=self.default_type,
        )
        logger.info("Created package %s at %s", package_key.value, package_path)

        self.rescan_packages()
        return self._packages[self.get_package_key_from_external_name(written.name)]


__all__ = [
    "PackageManager",
    "SKELETON_DIRECTORIES",
    "PACKAGE_STATE_AVAILABLE",
]
