"""Package manifest reading and writing.

A manifest is a YAML mapping stored in each package directory. Only ``name``
is required; ``type``, ``require``/``dependencies`` and ``autoload`` are
optional. The full document is kept on the manifest as ``raw`` so fields
this module does not interpret stay available to callers.
"""
from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from packstate.core.exceptions import (
    ManifestIncompleteError,
    ManifestMalformedError,
    ManifestMissingError,
    NotWritableError,
)
from packstate.core.schemas import iter_schema_errors
from packstate.core.utils.io import write_yaml

from .key import PackageKey, default_external_name

DEFAULT_MANIFEST_FILENAME = "package.yml"
DEFAULT_PACKAGE_TYPE = "packstate-package"
COLLECTION_TYPE = "package-collection"


@dataclass(frozen=True)
class Manifest:
    name: str
    type: Optional[str] = None
    dependencies: Tuple[str, ...] = ()
    autoload: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def is_collection(self, collection_type: str = COLLECTION_TYPE) -> bool:
        return self.type == collection_type


def literal_data(value: Any, where: str = "value") -> Any:
    """Return ``value`` as plain literal data for the package state cache.

    YAML timestamps become ISO 8601 strings and tuples become lists. Values
    that have no Python literal form raise ``TypeError``.
    """
    if isinstance(value, Mapping):
        return {str(k): literal_data(v, f"{where}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [literal_data(v, f"{where}[{i}]") for i, v in enumerate(value)]
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise TypeError(f"{where}: {value!r} has no literal form")
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    raise TypeError(f"{where}: unsupported value of type {type(value).__name__}")


def _dependency_names(data: Mapping[str, Any]) -> Tuple[str, ...]:
    names: list[str] = []
    for name in (data.get("require") or {}).keys():
        if str(name) not in names:
            names.append(str(name))
    for name in data.get("dependencies") or []:
        if str(name) not in names:
            names.append(str(name))
    return tuple(names)


def manifest_from_mapping(data: Mapping[str, Any], *, source: Any = "<memory>") -> Manifest:
    """Validate a manifest document and build a :class:`Manifest`.

    Raises:
        ManifestIncompleteError: If ``name`` is absent or empty.
        ManifestMalformedError: If the document violates the manifest schema.
    """
    if not isinstance(data, Mapping):
        raise ManifestMalformedError(source, f"expected a mapping, got {type(data).__name__}")
    if not data.get("name"):
        raise ManifestIncompleteError(source)

    errors = iter_schema_errors(dict(data), "manifest.schema")
    if errors:
        details = "; ".join(f"{path}: {message}" for path, message in errors)
        raise ManifestMalformedError(source, details)
    try:
        autoload = literal_data(data.get("autoload") or {}, "autoload")
    except TypeError as exc:
        raise ManifestMalformedError(source, str(exc)) from exc

    return Manifest(
        name=str(data["name"]),
        type=str(data["type"]) if data.get("type") else None,
        dependencies=_dependency_names(data),
        autoload=autoload,
        raw=dict(data),
    )


def read_manifest(package_path: Path, filename: str = DEFAULT_MANIFEST_FILENAME) -> Manifest:
    """Read the manifest stored in ``package_path``.

    Raises:
        ManifestMissingError: If there is no manifest file.
        ManifestMalformedError: If the file is not valid YAML or fails validation.
        ManifestIncompleteError: If the ``name`` field is missing.
    """
    manifest_path = Path(package_path) / filename
    if not manifest_path.is_file():
        raise ManifestMissingError(manifest_path)
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestMalformedError(manifest_path, f"unreadable: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestMalformedError(manifest_path, str(exc)) from exc
    if data is None:
        data = {}
    return manifest_from_mapping(data, source=manifest_path)


def new_manifest_document(
    key: PackageKey,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    default_type: str = DEFAULT_PACKAGE_TYPE,
) -> Dict[str, Any]:
    """Return the manifest document for a new package, defaults filled in."""
    data: Dict[str, Any] = dict(overrides or {})
    data.setdefault("name", default_external_name(key))
    data.setdefault("type", default_type)
    data.setdefault("description", "")
    data.setdefault("autoload", {"python": {key.value: "Classes/"}})
    data["key"] = key.value
    return data


def write_manifest(
    package_path: Path,
    key: PackageKey,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    filename: str = DEFAULT_MANIFEST_FILENAME,
    default_type: str = DEFAULT_PACKAGE_TYPE,
) -> Manifest:
    """Write a manifest for a new package and return it.

    Raises:
        NotWritableError: If the manifest file cannot be written.
    """
    data = new_manifest_document(key, overrides, default_type=default_type)
    manifest = manifest_from_mapping(data, source=Path(package_path) / filename)
    target = Path(package_path) / filename
    try:
        write_yaml(target, data)
    except OSError as exc:
        raise NotWritableError(target, str(exc)) from exc
    return manifest


__all__ = [
    "DEFAULT_MANIFEST_FILENAME",
    "DEFAULT_PACKAGE_TYPE",
    "COLLECTION_TYPE",
    "Manifest",
    "literal_data",
    "manifest_from_mapping",
    "new_manifest_document",
    "read_manifest",
    "write_manifest",
]
