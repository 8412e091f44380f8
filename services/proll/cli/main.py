"""
Command line entry point for proll.

Run via: proll <command> or python -m proll.cli.main <command>

  proll list PACKAGE              List every archived build matching PACKAGE
  proll downgrade PACKAGE [VER]   Install the single archived build matching PACKAGE/VER

Configuration comes from /etc/proll/config.yaml and PROLL_* environment variables.
"""

from __future__ import annotations

import argparse
import os
import sys

from proll import __version__
from proll.cache import get_index_cache
from proll.config import settings
from proll.errors import AmbiguousMatchError, ParseError, ProllError
from proll.logging_config import configure_logging, get_logger
from proll.package import PackageRecord, parse_identifier
from proll.services.index_service import get_index
from proll.services.install_service import exec_install
from proll.services.locator_service import locate
from proll.services.resolver_service import (
    DowngradeQuery,
    matching_lines,
    resolve,
    validate_version_query,
)

logger = get_logger(__name__)

RED = "\x1b[31m"
RESET = "\x1b[0m"


def use_color(no_color: bool) -> bool:
    """Color only interactive output, and honour NO_COLOR."""
    if no_color or os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def highlight(line: str, needle: str) -> str:
    """Wrap every occurrence of needle in line in red."""
    if not needle:
        return line
    return line.replace(needle, f"{RED}{needle}{RESET}")


def format_columns(records: list[PackageRecord]) -> list[str]:
    """Lay records out as aligned name/version/build/arch columns."""
    rows = [("NAME", "VERSION", "BUILD", "ARCH")] + [
        (r.name, r.version, str(r.build_version), str(r.arch)) for r in records
    ]
    widths = [max(len(row[i]) for row in rows) for i in range(3)]
    return [
        f"{name:<{widths[0]}}  {version:<{widths[1]}}  {build:>{widths[2]}}  {arch}"
        for name, version, build, arch in rows
    ]


def cmd_list(args: argparse.Namespace) -> int:
    """List archived builds matching a package name."""
    index = get_index(get_index_cache(), refresh=args.refresh)
    lines = matching_lines(index, args.package)
    if not lines:
        print(f"No package matches {args.package!r}", file=sys.stderr)
        return 1

    if args.raw:
        color = use_color(args.no_color)
        for line in lines:
            print(highlight(line, args.package) if color else line)
        return 0

    records: list[PackageRecord] = []
    for line in lines:
        try:
            records.append(parse_identifier(line))
        except ParseError as e:
            logger.debug("Skipping unparsable index line", line=line, reason=e.reason)

    for row in format_columns(records):
        print(row)
    return 0


def cmd_downgrade(args: argparse.Namespace) -> int:
    """Resolve a single archived build and hand it to the package manager."""
    # resolve() checks again; checking here first avoids downloading the index for a bad query
    if args.version is not None:
        validate_version_query(args.version)

    index = get_index(get_index_cache(), refresh=args.refresh)
    record = resolve(DowngradeQuery(args.package, args.version), index)
    url = locate(record)

    if args.print_url:
        print(url)
        return 0

    exec_install(url)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proll",
        description="Make pacman package rollbacks easy",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Command: list
    list_parser = subparsers.add_parser("list", help="List versions of a package")
    list_parser.add_argument("package", help="Name of the package (substring match)")
    list_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print index entries verbatim instead of as columns",
    )
    list_parser.add_argument("--no-color", action="store_true", help="Never highlight matches")
    list_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore the cached index and download it again",
    )
    list_parser.set_defaults(func=cmd_list)

    # Command: downgrade
    downgrade_parser = subparsers.add_parser(
        "downgrade", help="Install an archived build of a package"
    )
    downgrade_parser.add_argument("package", help="Name of the package (substring match)")
    downgrade_parser.add_argument(
        "version",
        nargs="?",
        default=None,
        help="Version to install (substring match, digits and dots only)",
    )
    downgrade_parser.add_argument(
        "--print-url",
        action="store_true",
        help="Print the package URL instead of installing it",
    )
    downgrade_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore the cached index and download it again",
    )
    downgrade_parser.set_defaults(func=cmd_downgrade)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    configure_logging(
        json_logs=settings.json_logs,
        log_level="DEBUG" if args.verbose else settings.log_level,
        colors=sys.stderr.isatty() and not os.environ.get("NO_COLOR"),
    )

    try:
        return args.func(args)
    except AmbiguousMatchError as e:
        print(f"error: {e}:", file=sys.stderr)
        for candidate in e.candidates:
            print(f"  {candidate}", file=sys.stderr)
        return 1
    except ProllError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
