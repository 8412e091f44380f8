"""
Index cache abstraction layer for proll.

Provides get_index_cache() to build the configured cache backend.
"""

from __future__ import annotations

from proll.cache.filesystem import FilesystemIndexCache
from proll.cache.protocol import CacheEntry, IndexCache
from proll.config import CacheConfig, settings

__all__ = ["CacheEntry", "FilesystemIndexCache", "IndexCache", "get_index_cache"]


def get_index_cache(cfg: CacheConfig | None = None) -> IndexCache | None:
    """Return the configured index cache, or None when caching is disabled."""
    cfg = cfg or settings.cache
    if not cfg.enabled:
        return None
    return FilesystemIndexCache(cfg.dir)
