"""
Index cache protocol and types for proll.

Defines the IndexCache Protocol that all cache backends must satisfy,
along with the shared entry type.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

# --- Data Types ---


@dataclass(frozen=True)
class CacheEntry:
    """A cached copy of the package index."""

    content: str
    fetched_at: datetime


# --- Protocol ---


@runtime_checkable
class IndexCache(Protocol):
    """Protocol defining the index cache interface.

    Implementations must satisfy this interface structurally (duck typing),
    no inheritance required. Freshness is decided by the caller, not the cache.
    """

    def read(self) -> CacheEntry | None:
        """Return the cached index.

        Returns:
            The cached entry, or None if nothing has been cached.

        Raises:
            CacheReadError: If a cache exists but cannot be read.
        """
        ...

    def write(self, content: str) -> CacheEntry:
        """Store a freshly fetched index, replacing any previous one.

        Args:
            content: The decompressed index text, stored verbatim.

        Returns:
            The stored entry, stamped with the current time.

        Raises:
            CacheWriteError: If the cache cannot be written.
        """
        ...
