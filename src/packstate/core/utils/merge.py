"""Layering of configuration sources.

The bundled defaults, each ``.packstate/config/*.yml`` file and the
``PACKSTATE_*`` environment overrides are applied in that order. Nested
sections merge key by key; any other value (lists included) replaces what the
earlier layer had.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` with ``override`` layered on top. Neither input is modified.

    Example:
        >>> deep_merge({"packages": {"basePath": "Packages"}}, {"packages": {"defaultType": "lib"}})
        {'packages': {'basePath': 'Packages', 'defaultType': 'lib'}}
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


__all__ = ["deep_merge"]
