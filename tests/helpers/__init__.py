"""Test helper modules for the packstate test suite.

- packages: write package directories, manifests and bootstrap classes
- cache_utils: cache reset utilities for test isolation
"""
from __future__ import annotations
