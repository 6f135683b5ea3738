"""Cache reset utilities for test isolation."""
from __future__ import annotations


def reset_packstate_caches() -> None:
    """Reset module-level caches that might persist state between tests."""
    from packstate.core.config.cache import clear_all_caches
    from packstate.core.utils.logging import reset_logging_for_tests

    clear_all_caches()
    reset_logging_for_tests()
