"""
Package identifiers as published in the archive index.

An identifier stub looks like ``zsa-udev-2.1.3.r14.gbceec97-1-any``: name,
version, build number and architecture joined by hyphens, with no escaping
of hyphens inside the name or version. Parsing therefore works from the
right, where the field count is fixed.
"""

from dataclasses import dataclass
from enum import StrEnum

from proll.errors import (
    InvalidBuildNumberError,
    MalformedIdentifierError,
    UnknownArchError,
)

MAX_BUILD_VERSION = 0xFFFF


class Architecture(StrEnum):
    """Architectures published in the archive."""

    X86_64 = "x86_64"
    ANY = "any"


@dataclass(frozen=True)
class PackageRecord:
    """One parsed archive identifier."""

    name: str
    version: str
    build_version: int
    arch: Architecture

    @property
    def full_name(self) -> str:
        """The identifier stub this record was parsed from."""
        return f"{self.name}-{self.version}-{self.build_version}-{self.arch}"


def _split_last(stub: str, remainder: str, field: str) -> tuple[str, str]:
    head, sep, tail = remainder.rpartition("-")
    if not sep:
        raise MalformedIdentifierError(stub, f"missing '-' before {field}")
    return head, tail


def parse_identifier(stub: str) -> PackageRecord:
    """Parse ``name-version-build-arch`` into a PackageRecord.

    Raises:
        MalformedIdentifierError: A hyphen separator is missing.
        UnknownArchError: The architecture is not x86_64 or any.
        InvalidBuildNumberError: The build number is not an unsigned 16-bit integer,
            or has leading zeros such as ``01`` that full_name could not reproduce.
    """
    rest, arch_token = _split_last(stub, stub, "architecture")
    try:
        arch = Architecture(arch_token)
    except ValueError:
        raise UnknownArchError(stub, f"unknown architecture {arch_token!r}") from None

    rest, build_token = _split_last(stub, rest, "build number")
    # ASCII digits only: int() alone also takes signs, underscores and Unicode digits
    if not (build_token.isascii() and build_token.isdigit()):
        raise InvalidBuildNumberError(stub, f"build number {build_token!r} is not numeric")
    # Leading zeros would not survive reconstruction via full_name
    if len(build_token) > 1 and build_token.startswith("0"):
        raise InvalidBuildNumberError(stub, f"build number {build_token!r} has leading zeros")
    build_version = int(build_token)
    if build_version > MAX_BUILD_VERSION:
        raise InvalidBuildNumberError(stub, f"build number {build_token} is out of range")

    name, version = _split_last(stub, rest, "version")

    return PackageRecord(
        name=name,
        version=version,
        build_version=build_version,
        arch=arch,
    )
