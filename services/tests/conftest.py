"""
Top-level test configuration for proll.
"""

import os

# Ensure test-friendly defaults
os.environ.setdefault("PROLL_JSON_LOGS", "false")
os.environ.setdefault("PROLL_LOG_LEVEL", "DEBUG")

import lzma  # noqa: E402
from collections.abc import Callable  # noqa: E402
from datetime import UTC, datetime  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from proll.cache.protocol import CacheEntry  # noqa: E402
from proll.config import ArchiveConfig  # noqa: E402
from proll.errors import CacheReadError, CacheWriteError  # noqa: E402

ARCHIVE_URL = "https://archive.test"
INDEX_URL = f"{ARCHIVE_URL}/packages/.all/index.0.xz"

SAMPLE_INDEX = "\n".join(
    [
        "caddy-1.0.4-2-x86_64",
        "caddy-2.4.3-1-x86_64",
        "foo-1.0-1-any",
        "foo-2.0-1-any",
        "zsa-udev-2.1.3.r12.g7ce7ff3-2-any",
        "zsa-udev-2.1.3.r14.gbceec97-1-any",
        "broken-line",
        "",
    ]
)


class MemoryIndexCache:
    """In-memory IndexCache stand-in that records how it was used."""

    def __init__(
        self,
        entry: CacheEntry | None = None,
        read_error: CacheReadError | None = None,
        write_error: CacheWriteError | None = None,
    ) -> None:
        self.entry = entry
        self.read_error = read_error
        self.write_error = write_error
        self.reads = 0
        self.writes: list[str] = []

    def read(self) -> CacheEntry | None:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        return self.entry

    def write(self, content: str) -> CacheEntry:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(content)
        self.entry = CacheEntry(content=content, fetched_at=datetime.now(UTC))
        return self.entry


class RecordingHandler:
    """httpx.MockTransport handler serving canned responses by URL."""

    def __init__(self, routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        return route


def xz(text: str) -> bytes:
    return lzma.compress(text.encode("utf-8"), format=lzma.FORMAT_XZ)


@pytest.fixture
def archive_cfg() -> ArchiveConfig:
    return ArchiveConfig(url=ARCHIVE_URL, timeout_seconds=5.0)


@pytest.fixture
def make_client() -> Callable[..., tuple[httpx.Client, RecordingHandler]]:
    """Build an httpx.Client whose requests never leave the process."""
    clients: list[httpx.Client] = []

    def _make(routes: dict) -> tuple[httpx.Client, RecordingHandler]:
        handler = RecordingHandler(routes)
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)
        return client, handler

    yield _make

    for client in clients:
        client.close()
