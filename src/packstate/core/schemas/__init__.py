"""JSON Schema validation for configuration and package manifests."""
from __future__ import annotations

from .validation import iter_schema_errors, load_schema, validate_payload

__all__ = ["load_schema", "validate_payload", "iter_schema_errors"]
