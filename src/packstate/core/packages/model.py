"""Package records and the persisted package state."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .key import PackageKey
from .manifest import Manifest, literal_data


class PackageCapability(str, Enum):
    """What the package manager may do with a package beyond registering it."""

    PLAIN = "plain"
    FRAMEWORK_AWARE = "framework-aware"
    BOOTABLE = "bootable"


def relative_package_path(base_path: Path, package_path: Path) -> str:
    """Return ``package_path`` relative to ``base_path`` in POSIX form."""
    try:
        rel = Path(package_path).resolve().relative_to(Path(base_path).resolve())
    except ValueError:
        # Outside the base path: keep it absolute rather than guessing.
        return Path(package_path).resolve().as_posix()
    return PurePosixPath(*rel.parts).as_posix()


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class PackageRecord:
    """One discovered package. Never mutated after construction.

    ``autoload`` and ``class_info`` are stored as read-only views (nested
    lists become tuples); ``to_state()`` returns plain copies.
    """

    key: PackageKey
    path: str
    external_name: str
    dependencies: Tuple[str, ...] = ()
    autoload: Mapping[str, Any] = field(default_factory=dict)
    class_info: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "autoload", _freeze(literal_data(self.autoload, "autoload")))
        if self.class_info:
            object.__setattr__(self, "class_info", _freeze(literal_data(self.class_info, "class_info")))
        else:
            object.__setattr__(self, "class_info", None)

    @property
    def package_key(self) -> str:
        return self.key.value

    @property
    def capability(self) -> PackageCapability:
        if not self.class_info:
            return PackageCapability.PLAIN
        if self.class_info.get("bootable"):
            return PackageCapability.BOOTABLE
        return PackageCapability.FRAMEWORK_AWARE

    def absolute_path(self, base_path: Path) -> Path:
        path = Path(self.path)
        return path if path.is_absolute() else Path(base_path) / path

    @classmethod
    def from_manifest(
        cls,
        *,
        key: PackageKey,
        base_path: Path,
        package_path: Path,
        manifest: Manifest,
        class_info: Optional[Dict[str, Any]] = None,
    ) -> "PackageRecord":
        return cls(
            key=key,
            path=relative_package_path(base_path, package_path),
            external_name=manifest.name,
            dependencies=tuple(manifest.dependencies),
            autoload=manifest.autoload,
            class_info=class_info,
        )

    def to_state(self) -> Dict[str, Any]:
        """Serialize to the package-state entry shape."""
        return {
            "packageKey": self.key.value,
            "packagePath": self.path,
            "externalName": self.external_name,
            "autoloadConfiguration": _thaw(self.autoload),
            "packageClassInfo": _thaw(self.class_info) if self.class_info else None,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_state(cls, external_name: str, entry: Mapping[str, Any]) -> "PackageRecord":
        """Rebuild a record from a package-state entry.

        Raises:
            InvalidKeyError: If the stored key is not valid.
            KeyError/TypeError: If the entry lacks required fields.
        """
        class_info = entry.get("packageClassInfo")
        return cls(
            key=PackageKey.from_string(entry["packageKey"]),
            path=str(entry["packagePath"]),
            external_name=str(entry.get("externalName") or external_name),
            dependencies=tuple(entry.get("dependencies") or ()),
            autoload=entry.get("autoloadConfiguration") or {},
            class_info=class_info or None,
        )


@dataclass
class PackageState:
    """Ordered mapping of external name to record; the order is the load order."""

    packages: Dict[str, PackageRecord] = field(default_factory=dict)
    version: int = 0

    @classmethod
    def from_records(cls, records: Iterable[PackageRecord], *, version: int = 0) -> "PackageState":
        return cls(packages={r.external_name: r for r in records}, version=version)

    @property
    def load_order(self) -> Tuple[str, ...]:
        return tuple(self.packages.keys())

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "packages": {name: record.to_state() for name, record in self.packages.items()},
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PackageState":
        """Build a state from the persisted ``{version, packages}`` shape.

        Raises:
            TypeError/KeyError/ValueError: If the payload is malformed.
        """
        packages = payload["packages"]
        if not isinstance(packages, Mapping):
            raise TypeError(f"packages must be a mapping, got {type(packages).__name__}")
        version = payload["version"]
        if not isinstance(version, int) or isinstance(version, bool):
            raise TypeError(f"version must be an integer, got {type(version).__name__}")
        return cls(
            packages={str(name): PackageRecord.from_state(str(name), entry) for name, entry in packages.items()},
            version=version,
        )


__all__ = [
    "PackageCapability",
    "PackageRecord",
    "PackageState",
    "relative_package_path",
]
