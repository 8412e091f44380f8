"""Service layer for resolving downgrade candidates from the package index.

Matching is a plain substring test on the raw index lines, shared by the
``list`` and ``downgrade`` commands so both agree on what matches.
"""

import re
from dataclasses import dataclass

from proll.errors import (
    AmbiguousMatchError,
    InvalidVersionFormatError,
    NoMatchError,
    ParseError,
)
from proll.logging_config import get_logger
from proll.package import PackageRecord, parse_identifier

logger = get_logger(__name__)

VERSION_QUERY_RE = re.compile(r"[0-9.]+")


@dataclass(frozen=True)
class DowngradeQuery:
    """What the user asked to downgrade to."""

    name_substring: str
    version_substring: str | None = None


def matching_lines(index: str, name_substring: str) -> list[str]:
    """Return every non-empty index line containing name_substring, in index order."""
    return [line for line in index.split("\n") if line and name_substring in line]


def validate_version_query(version: str) -> str:
    """Reject version queries containing anything but digits and dots."""
    if not VERSION_QUERY_RE.fullmatch(version):
        raise InvalidVersionFormatError(version)
    return version


def filter_by_version(lines: list[str], version_substring: str) -> list[str]:
    """Keep lines whose parsed version contains version_substring.

    Lines that fail to parse are skipped.
    """
    kept: list[str] = []
    for line in lines:
        try:
            record = parse_identifier(line)
        except ParseError as e:
            logger.debug("Skipping unparsable index line", line=line, reason=e.reason)
            continue
        if version_substring in record.version:
            kept.append(line)
    return kept


def find_candidates(query: DowngradeQuery, index: str) -> list[str]:
    """Return the raw index lines matching query."""
    if query.version_substring is not None:
        validate_version_query(query.version_substring)

    candidates = matching_lines(index, query.name_substring)
    if query.version_substring is not None:
        candidates = filter_by_version(candidates, query.version_substring)
    return candidates


def resolve(query: DowngradeQuery, index: str) -> PackageRecord:
    """Resolve query to exactly one package in index.

    Raises:
        InvalidVersionFormatError: The version query is not dotted-numeric.
        NoMatchError: Nothing matches.
        AmbiguousMatchError: More than one line matches; carries the candidates.
        ParseError: The single match is not a valid identifier.
    """
    candidates = find_candidates(query, index)

    if not candidates:
        raise NoMatchError(query.name_substring, query.version_substring)
    if len(candidates) > 1:
        raise AmbiguousMatchError(candidates)

    record = parse_identifier(candidates[0])
    logger.info("Resolved downgrade candidate", package=record.full_name)
    return record
