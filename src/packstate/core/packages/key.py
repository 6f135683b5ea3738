"""Package keys.

A package key is one or more dot-separated segments, each starting with an
uppercase letter followed by letters and digits (``Vendor.PackageName``).
Keys are stored with their canonical spelling; comparisons for lookup are
done on the lower-cased form by the package manager.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Mapping, Optional, Union

from packstate.core.exceptions import InvalidKeyError

PACKAGE_KEY_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*(?:\.[A-Z][A-Za-z0-9]*)*$")

_WORD_SPLIT = re.compile(r"[-_\s]+")
_STRIP = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class PackageKey:
    value: str

    def __post_init__(self) -> None:
        if not self.is_valid(self.value):
            raise InvalidKeyError(self.value)

    def __str__(self) -> str:
        return self.value

    @property
    def lowered(self) -> str:
        return self.value.lower()

    @classmethod
    def from_string(cls, value: Union[str, "PackageKey"]) -> "PackageKey":
        if isinstance(value, PackageKey):
            return value
        return cls(str(value))

    @staticmethod
    def is_valid(value: Any) -> bool:
        return isinstance(value, str) and PACKAGE_KEY_PATTERN.match(value) is not None

    @classmethod
    def derive_from_manifest_or_path(cls, manifest: Any, package_path: Union[str, PurePath]) -> "PackageKey":
        """Derive the key for a discovered package.

        Priority: explicit ``key`` field, ``extra.packstate.package-key``,
        the external name, then the final path segment.

        Raises:
            InvalidKeyError: If no candidate yields a valid key.
        """
        explicit = _explicit_key(manifest)
        if explicit is not None:
            return cls(explicit)

        name = getattr(manifest, "name", None)
        if name is None and isinstance(manifest, Mapping):
            name = manifest.get("name")

        candidates = []
        if name:
            candidates.append(derive_key_string(str(name)))
        candidates.append(derive_key_string(PurePath(package_path).name))

        for candidate in candidates:
            if cls.is_valid(candidate):
                return cls(candidate)
        raise InvalidKeyError(candidates[0] if candidates else str(package_path), context={"path": str(package_path)})


def _explicit_key(manifest: Any) -> Optional[str]:
    if isinstance(manifest, Mapping):
        raw = manifest
    else:
        raw = getattr(manifest, "raw", None) or {}
    key = raw.get("key")
    if key:
        return str(key)
    extra = raw.get("extra")
    if isinstance(extra, Mapping):
        section = extra.get("packstate")
        if isinstance(section, Mapping) and section.get("package-key"):
            return str(section["package-key"])
    return None


def _camel(segment: str) -> str:
    parts = [_STRIP.sub("", p) for p in _WORD_SPLIT.split(segment)]
    return "".join(p[:1].upper() + p[1:] for p in parts if p)


def derive_key_string(name: str) -> str:
    """Turn an external name or directory name into a key candidate.

    >>> derive_key_string("acme/foo-bar")
    'Acme.FooBar'
    >>> derive_key_string("acme/foo.bar")
    'Acme.Foo.Bar'
    """
    segments = []
    for part in name.replace("\\", "/").split("/"):
        for segment in part.split("."):
            camel = _camel(segment)
            if camel:
                segments.append(camel)
    return ".".join(segments)


def default_external_name(key: PackageKey) -> str:
    """External name used for newly created packages (``Acme.Foo.Bar`` -> ``acme/foo.bar``)."""
    lowered = key.lowered
    vendor, sep, rest = lowered.partition(".")
    return f"{vendor}/{rest}" if sep else lowered


__all__ = [
    "PACKAGE_KEY_PATTERN",
    "PackageKey",
    "derive_key_string",
    "default_external_name",
]
