from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping


class PackstateError(Exception):
    """Base exception for packstate."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(PackstateError, ValueError):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PackstateError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class SchemaValidationError(PackstateError, ValueError):
    """Raised when a payload does not satisfy its JSON schema."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PackstateError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


# ---------------------------------------------------------------------------
# Structural input errors
# ---------------------------------------------------------------------------


class InvalidKeyError(PackstateError, ValueError):
    """Raised when a package key does not match the key pattern."""

    def __init__(self, key: str, *, context: Mapping[str, Any] | None = None) -> None:
        ctx = {"key": key, **dict(context or {})}
        message = f'The package key "{key}" is not valid.'
        PackstateError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)


class ManifestMissingError(PackstateError, FileNotFoundError):
    """Raised when a package directory has no manifest file."""

    def __init__(self, path: Any) -> None:
        message = f"No package manifest found at {path}"
        PackstateError.__init__(self, message, context={"path": str(path)})
        FileNotFoundError.__init__(self, message)


class ManifestMalformedError(PackstateError, ValueError):
    """Raised when a manifest cannot be parsed or violates the manifest schema."""

    def __init__(self, path: Any, details: str) -> None:
        message = f"Malformed package manifest at {path}: {details}"
        PackstateError.__init__(self, message, context={"path": str(path), "details": details})
        ValueError.__init__(self, message)


class ManifestIncompleteError(PackstateError, ValueError):
    """Raised when a manifest lacks the required ``name`` field."""

    def __init__(self, path: Any) -> None:
        message = f'A package manifest was found at "{path}" that contained no "name".'
        PackstateError.__init__(self, message, context={"path": str(path)})
        ValueError.__init__(self, message)


class CorruptPackageError(PackstateError, ValueError):
    """Raised when a package's bootstrap class file cannot be inspected."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PackstateError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class DiscoveryConflictError(PackstateError, RuntimeError):
    """Raised when two discovered packages claim the same identity."""

    def __init__(self, name: str, first_path: str, second_path: str) -> None:
        message = (
            f'The package with the name "{name}" was found more than once, please make sure '
            f'it exists only once. Paths "{second_path}" and "{first_path}".'
        )
        PackstateError.__init__(
            self,
            message,
            context={"name": name, "paths": [first_path, second_path]},
        )
        RuntimeError.__init__(self, message)


# ---------------------------------------------------------------------------
# Graph errors
# ---------------------------------------------------------------------------


class CycleDetectedError(PackstateError, RuntimeError):
    """Raised when package dependencies form a cycle."""

    def __init__(self, packages: Iterable[str]) -> None:
        names = sorted(packages)
        message = "Dependency cycle detected between packages: " + ", ".join(names)
        PackstateError.__init__(self, message, context={"packages": names})
        RuntimeError.__init__(self, message)
        self.packages = names


# ---------------------------------------------------------------------------
# I/O errors
# ---------------------------------------------------------------------------


class NotWritableError(PackstateError, OSError):
    """Raised when a package state file or package skeleton cannot be written."""

    def __init__(self, path: Any, details: str = "") -> None:
        message = (
            f"Could not write {path}. Please check the file system permissions "
            "and available disk space."
        )
        if details:
            message = f"{message} ({details})"
        PackstateError.__init__(self, message, context={"path": str(path), "details": details})
        OSError.__init__(self, message)


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------


class UnknownPackageError(PackstateError, LookupError):
    """Raised when a requested package is not available."""

    def __init__(self, key: str) -> None:
        message = (
            f'Package "{key}" is not available. Please check if the package exists '
            "and that the package key is correct."
        )
        PackstateError.__init__(self, message, context={"key": key})
        LookupError.__init__(self, message)


class KeyAlreadyExistsError(PackstateError, ValueError):
    """Raised when creating a package whose key is already registered."""

    def __init__(self, key: str) -> None:
        message = f'The package key "{key}" already exists'
        PackstateError.__init__(self, message, context={"key": key})
        ValueError.__init__(self, message)


class ExternalNameAlreadyExistsError(PackstateError, ValueError):
    """Raised when a new package would reuse a registered external name."""

    def __init__(self, name: str, owner: str) -> None:
        message = f'The package name "{name}" is already used by package "{owner}"'
        PackstateError.__init__(self, message, context={"name": name, "owner": owner})
        ValueError.__init__(self, message)


class InvalidPackageStateError(PackstateError, ValueError):
    """Raised for unknown package states or unresolvable package state lookups."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        PackstateError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


__all__ = [
    "PackstateError",
    "ConfigError",
    "SchemaValidationError",
    "InvalidKeyError",
    "ManifestMissingError",
    "ManifestMalformedError",
    "ManifestIncompleteError",
    "CorruptPackageError",
    "DiscoveryConflictError",
    "CycleDetectedError",
    "NotWritableError",
    "UnknownPackageError",
    "KeyAlreadyExistsError",
    "ExternalNameAlreadyExistsError",
    "InvalidPackageStateError",
]
