"""
Filesystem index cache for proll.

Keeps the index as two sibling files in a well-known directory: ``pkgs``
holds the decompressed index text and ``date`` holds the ISO 8601 UTC
timestamp of the fetch. Deleting the directory forces a fresh download.
"""

from __future__ import annotations

import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from proll.cache.protocol import CacheEntry
from proll.errors import CacheReadError, CacheWriteError
from proll.logging_config import get_logger

logger = get_logger(__name__)

PAYLOAD_FILENAME = "pkgs"
TIMESTAMP_FILENAME = "date"


def _write_text(path: Path, text: str) -> None:
    # Temp name is unique per writer so concurrent runs never share a descriptor
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with open(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def parse_timestamp(raw: str) -> datetime:
    """Parse a stored timestamp; naive values are taken as UTC."""
    fetched_at = datetime.fromisoformat(raw.strip())
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=UTC)
    return fetched_at


class FilesystemIndexCache:
    """Index cache backed by the local filesystem.

    Each file is replaced atomically, but the pair is not: concurrent runs can
    leave one run's payload next to another run's timestamp.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._dir = Path(cache_dir)

    @property
    def payload_path(self) -> Path:
        return self._dir / PAYLOAD_FILENAME

    @property
    def timestamp_path(self) -> Path:
        return self._dir / TIMESTAMP_FILENAME

    def read(self) -> CacheEntry | None:
        try:
            if not self._dir.exists():
                return None
        except OSError as e:
            raise CacheReadError(f"Cannot access {self._dir}: {e}") from e

        try:
            raw_timestamp = _read_text(self.timestamp_path)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(f"Cannot read {self.timestamp_path}: {e}") from e

        try:
            fetched_at = parse_timestamp(raw_timestamp)
        except ValueError as e:
            raise CacheReadError(
                f"Invalid timestamp in {self.timestamp_path}: {raw_timestamp!r}"
            ) from e

        try:
            content = _read_text(self.payload_path)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(f"Cannot read {self.payload_path}: {e}") from e

        return CacheEntry(content=content, fetched_at=fetched_at)

    def write(self, content: str) -> CacheEntry:
        fetched_at = datetime.now(UTC)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            _write_text(self.payload_path, content)
            _write_text(self.timestamp_path, fetched_at.isoformat())
        except OSError as e:
            raise CacheWriteError(f"Cannot write index cache in {self._dir}: {e}") from e

        logger.debug("Index cache written", cache_dir=str(self._dir), size_bytes=len(content))
        return CacheEntry(content=content, fetched_at=fetched_at)

    @property
    def cache_dir(self) -> Path:
        """The directory holding the cache files."""
        return self._dir
