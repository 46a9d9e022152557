"""
Shell command execution for installer steps.

Commands run in the foreground with their output streamed straight into the
CI log. A failing command raises InstallCommandError; there is no retry.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from lazaruskit.core.exceptions import InstallCommandError

logger = logging.getLogger(__name__)


def run_command(
    cmd: Sequence[Union[str, Path]], cwd: Optional[Path] = None
) -> None:
    """
    Run a command and fail loudly if it does not succeed.

    Args:
        cmd: Command and arguments
        cwd: Optional working directory

    Raises:
        InstallCommandError: If the command exits non-zero or cannot be started

    Example:
        >>> run_command(["sudo", "apt", "install", "-y", "/tmp/installers/fpc.deb"])
    """
    args: List[str] = [str(part) for part in cmd]
    logger.info(f"[command] {' '.join(args)}")

    try:
        result = subprocess.run(args, cwd=cwd)
    except OSError as e:
        raise InstallCommandError(args, -1, f"Failed to execute: {e}") from e

    if result.returncode != 0:
        raise InstallCommandError(args, result.returncode)
