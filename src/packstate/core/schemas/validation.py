"""Shared schema validation utilities.

Schemas are JSON Schema documents written as YAML and bundled under
``packstate.data/schemas/``. They are loaded once per process.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Tuple

from jsonschema import Draft202012Validator

from packstate.core.exceptions import SchemaValidationError
from packstate.core.utils.io import read_yaml
from packstate.data import get_data_path


@lru_cache(maxsize=16)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name.

    Automatically appends ``.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If schema file doesn't exist.
        ValueError: If schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.yaml"

    schema_path = get_data_path("schemas", schema_name)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name} (searched {schema_path.parent})")

    schema = read_yaml(schema_path, default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    Draft202012Validator.check_schema(schema)
    return schema


def iter_schema_errors(payload: Any, schema_name: str) -> List[Tuple[str, str]]:
    """Return ``(path, message)`` pairs for every schema violation, sorted by path."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[Tuple[str, str]] = []
    for err in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path]):
        path = "/".join(str(p) for p in err.path) or "<root>"
        errors.append((path, err.message))
    return errors


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate a payload against a bundled JSON schema.

    Raises:
        SchemaValidationError: If validation fails.
    """
    errors = iter_schema_errors(payload, schema_name)
    if errors:
        details = "; ".join(f"{path}: {message}" for path, message in errors)
        raise SchemaValidationError(
            f"Validation failed against schema '{schema_name}': {details}",
            context={"schema": schema_name, "errors": [list(e) for e in errors]},
        )


__all__ = [
    "load_schema",
    "iter_schema_errors",
    "validate_payload",
]
