"""
packstate - package discovery, dependency ordering and state caching

Locates installable packages on disk, orders them so that every package's
dependencies load first, and persists that order in a fast-loading cache.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
