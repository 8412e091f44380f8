"""Hand-off to the system package manager.

On success the current process is replaced and nothing after the exec runs.
"""

import os
from collections.abc import Sequence

from proll.config import settings
from proll.errors import InvocationError
from proll.logging_config import get_logger

logger = get_logger(__name__)


def install_command(url: str, command: Sequence[str] | None = None) -> list[str]:
    """Build the argv that installs the package file at url."""
    base = list(command if command is not None else settings.install.command)
    if not base:
        raise InvocationError("No install command configured")
    return [*base, url]


def exec_install(url: str, command: Sequence[str] | None = None) -> None:
    """Replace this process with the package manager installing url.

    Raises:
        InvocationError: The command could not be launched.
    """
    argv = install_command(url, command)
    logger.info("Handing off to package manager", argv=argv)
    try:
        os.execvp(argv[0], argv)
    except OSError as e:
        raise InvocationError(f"Cannot run {argv[0]!r}: {e}") from e
