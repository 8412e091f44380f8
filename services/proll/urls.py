"""
URL helpers for the package archive.

Provides consistent URL construction for everything fetched from the archive.
All helpers take the archive root so tests and mirrors can substitute their own.
"""

from proll.package import PackageRecord


def index_url(archive_url: str, index_path: str) -> str:
    """URL of the compressed package index."""
    return f"{archive_url.rstrip('/')}/{index_path.lstrip('/')}"


def package_directory_url(archive_url: str, name: str) -> str:
    """URL of the directory listing holding every build of a package."""
    return f"{archive_url.rstrip('/')}/packages/{name[0]}/{name}"


def artifact_url(archive_url: str, record: PackageRecord, extension: str) -> str:
    """URL of a single package file."""
    return f"{package_directory_url(archive_url, record.name)}/{record.full_name}{extension}"
