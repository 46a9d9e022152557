"""
GitHub Actions runner integration.

Implements the small subset of the runner's workflow-command protocol the
installer needs: reading action inputs, extending PATH and exporting
environment variables for later steps, log groups and failure annotations.

Outside a runner (no GITHUB_PATH / GITHUB_ENV) the changes only apply to the
current process environment.
"""

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def get_input(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read an action input from the environment.

    The runner exposes input ``lazarus-version`` as ``INPUT_LAZARUS-VERSION``.

    Returns:
        The stripped value, or default when the input is unset or blank
    """
    value = os.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "")
    value = value.strip()
    return value if value else default


def _append_to_file_command(env_name: str, line: str) -> bool:
    command_file = os.environ.get(env_name)
    if not command_file:
        return False
    with open(command_file, "a", encoding="utf-8") as f:
        f.write(line + "\n")
    return True


def add_path(path: Union[str, Path]) -> None:
    """Prepend a directory to PATH for this process and for later workflow steps."""
    path = str(path)
    _append_to_file_command("GITHUB_PATH", path)
    os.environ["PATH"] = path + os.pathsep + os.environ.get("PATH", "")
    logger.debug(f"Added {path} to PATH")


def export_variable(name: str, value: Union[str, Path]) -> None:
    """Set an environment variable for this process and for later workflow steps."""
    value = str(value)
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    _append_to_file_command("GITHUB_ENV", f"{name}<<{delimiter}\n{value}\n{delimiter}")
    os.environ[name] = value
    logger.debug(f"Exported {name}={value}")


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(message: str) -> None:
    """Emit an error annotation for the run."""
    sys.stdout.write(f"::error::{_escape_data(message)}\n")
    sys.stdout.flush()


@contextmanager
def group(title: str):
    """Fold everything logged inside the block into a collapsible log group."""
    sys.stdout.write(f"::group::{_escape_data(title)}\n")
    sys.stdout.flush()
    try:
        yield
    finally:
        sys.stdout.write("::endgroup::\n")
        sys.stdout.flush()
