"""Service layer for the archive package index.

Read-through cache: the index is a tens-of-megabytes xz file that changes
continuously, so a local copy is reused while it is younger than the
configured TTL and fetched again after that. Failing to read the cache only
costs a download; failing to write it is reported.
"""

import lzma
from datetime import UTC, datetime, timedelta

import httpx

from proll.cache.protocol import IndexCache
from proll.config import ArchiveConfig, settings
from proll.errors import CacheReadError, FetchError
from proll.logging_config import get_logger
from proll.urls import index_url

logger = get_logger(__name__)


def get_index(
    cache: IndexCache | None,
    ttl: timedelta | None = None,
    refresh: bool = False,
    client: httpx.Client | None = None,
    now: datetime | None = None,
    archive_cfg: ArchiveConfig | None = None,
) -> str:
    """Return the package index, from cache when fresh, else from the archive.

    Raises:
        FetchError: The cache missed and the download failed.
        CacheWriteError: The download succeeded but could not be cached.
    """
    if ttl is None:
        ttl = timedelta(seconds=settings.cache.ttl_seconds)

    if cache is not None and not refresh:
        cached = _read_fresh(cache, ttl, now or datetime.now(UTC))
        if cached is not None:
            return cached

    content = fetch_index(client=client, cfg=archive_cfg)

    if cache is not None:
        cache.write(content)

    return content


def is_fresh(fetched_at: datetime, ttl: timedelta, now: datetime) -> bool:
    """A cached index is fresh while it is younger than the TTL."""
    age = now - fetched_at
    return timedelta(0) <= age < ttl


def fetch_index(
    client: httpx.Client | None = None,
    cfg: ArchiveConfig | None = None,
) -> str:
    """Download and decompress the archive's package index.

    Raises:
        FetchError: On transport errors, non-success status, or a corrupt stream.
    """
    cfg = cfg or settings.archive
    url = index_url(cfg.url, cfg.index_path)

    logger.info("Fetching package index", url=url)
    data = _download(url, client, cfg.timeout_seconds)

    try:
        content = lzma.decompress(data, format=lzma.FORMAT_XZ).decode("utf-8")
    except (lzma.LZMAError, UnicodeDecodeError) as e:
        raise FetchError(f"Cannot decompress package index from {url}: {e}") from e

    logger.info("Package index fetched", compressed_bytes=len(data), size_bytes=len(content))
    return content


# --- Internal helpers ---


def _read_fresh(cache: IndexCache, ttl: timedelta, now: datetime) -> str | None:
    try:
        entry = cache.read()
    except CacheReadError as e:
        logger.warning("Index cache read failed, fetching instead", error=str(e))
        return None

    if entry is None:
        logger.debug("Index cache empty")
        return None

    if entry.fetched_at > now:
        logger.warning(
            "Index cache timestamp is in the future, fetching instead",
            fetched_at=entry.fetched_at.isoformat(),
        )
        return None

    if not is_fresh(entry.fetched_at, ttl, now):
        logger.debug("Index cache stale", fetched_at=entry.fetched_at.isoformat())
        return None

    logger.debug("Index cache hit", fetched_at=entry.fetched_at.isoformat())
    return entry.content


def _download(url: str, client: httpx.Client | None, timeout: float) -> bytes:
    try:
        if client is not None:
            resp = client.get(url)
            resp.raise_for_status()
        else:
            with httpx.Client(follow_redirects=True, timeout=timeout) as own_client:
                resp = own_client.get(url)
                resp.raise_for_status()
    except httpx.HTTPError as e:
        raise FetchError(f"Cannot download package index from {url}: {e}") from e

    return resp.content
