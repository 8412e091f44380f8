"""
Exception hierarchy for proll.

Every failure the command line reports derives from ProllError. Cache read
failures are the one kind callers recover from; everything else is fatal.
"""


class ProllError(Exception):
    """Base exception for proll operations."""


# --- Identifier parsing ---


class ParseError(ProllError):
    """Raised when an identifier stub cannot be parsed."""

    def __init__(self, stub: str, reason: str) -> None:
        self.stub = stub
        self.reason = reason
        super().__init__(f"Cannot parse package identifier {stub!r}: {reason}")


class MalformedIdentifierError(ParseError):
    """Raised when a stub lacks one of its hyphen separators."""


class UnknownArchError(ParseError):
    """Raised when the architecture token is not a known architecture."""


class InvalidBuildNumberError(ParseError):
    """Raised when the build number is not an unsigned 16-bit integer."""


# --- Index cache ---


class CacheError(ProllError):
    """Base exception for index cache operations."""


class CacheReadError(CacheError):
    """Raised when an existing cache cannot be read. Callers fall back to a fetch."""


class CacheWriteError(CacheError):
    """Raised when the cache cannot be written."""


# --- Archive access ---


class FetchError(ProllError):
    """Raised when the package index cannot be downloaded or decompressed."""


class LocateError(ProllError):
    """Raised when a package artifact cannot be located in the archive."""


class ExtensionNotFoundError(LocateError):
    """Raised when no known package extension is listed for an identifier."""

    def __init__(self, full_name: str, directory_url: str) -> None:
        self.full_name = full_name
        self.directory_url = directory_url
        super().__init__(f"Could not find a package file for {full_name} in {directory_url}")


# --- Resolution ---


class ResolutionError(ProllError):
    """Base exception for downgrade candidate resolution."""


class InvalidVersionFormatError(ResolutionError):
    """Raised when a version query contains anything but digits and dots."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Invalid version {version!r}: only digits and '.' are allowed")


class NoMatchError(ResolutionError):
    """Raised when no index entry matches the query."""

    def __init__(self, name: str, version: str | None = None) -> None:
        self.name = name
        self.version = version
        query = name if version is None else f"{name} {version}"
        super().__init__(f"No package matches {query!r}")


class AmbiguousMatchError(ResolutionError):
    """Raised when more than one index entry matches the query."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(
            f"{len(candidates)} packages match, narrow the query to pick one"
        )


# --- Invocation ---


class InvocationError(ProllError):
    """Raised when the external package manager cannot be launched."""
