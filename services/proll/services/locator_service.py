"""Service layer for locating package files in the archive.

The archive groups builds by the first letter of the package name, then by
name. The file extension changed over the archive's lifetime, so the
directory listing is probed for each known extension, newest first.
"""

import httpx

from proll.config import ArchiveConfig, settings
from proll.errors import ExtensionNotFoundError, LocateError
from proll.logging_config import get_logger
from proll.package import PackageRecord
from proll.urls import artifact_url, package_directory_url

logger = get_logger(__name__)


def locate(
    record: PackageRecord,
    client: httpx.Client | None = None,
    cfg: ArchiveConfig | None = None,
) -> str:
    """Return the download URL of record's package file.

    Raises:
        LocateError: The directory listing could not be fetched.
        ExtensionNotFoundError: No known extension is listed for record.
    """
    cfg = cfg or settings.archive
    if not record.name:
        raise LocateError(f"Cannot locate {record.full_name!r}: package name is empty")

    directory_url = package_directory_url(cfg.url, record.name)
    listing = _fetch_listing(directory_url, client, cfg.timeout_seconds)

    extension = pick_extension(listing, record.full_name, cfg.package_extensions)
    if extension is None:
        raise ExtensionNotFoundError(record.full_name, directory_url)

    url = artifact_url(cfg.url, record, extension)
    logger.info("Package file located", package=record.full_name, url=url)
    return url


def pick_extension(listing: str, full_name: str, extensions: list[str]) -> str | None:
    """Return the first extension whose file name appears in listing."""
    for extension in extensions:
        if f"{full_name}{extension}" in listing:
            return extension
    return None


# --- Internal helpers ---


def _fetch_listing(url: str, client: httpx.Client | None, timeout: float) -> str:
    try:
        if client is not None:
            resp = client.get(url)
            resp.raise_for_status()
        else:
            with httpx.Client(follow_redirects=True, timeout=timeout) as own_client:
                resp = own_client.get(url)
                resp.raise_for_status()
    except httpx.HTTPError as e:
        raise LocateError(f"Cannot fetch package directory {url}: {e}") from e

    return resp.text
