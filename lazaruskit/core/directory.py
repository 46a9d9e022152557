"""
Directory resolution for LazarusKit.

Directory Structure:
    Runner temp (``$RUNNER_TEMP``):
        - installers/           : Downloaded installer artifacts
        - installers/lazarus/   : Windows Lazarus installation directory

    Installer cache (``$RUNNER_TOOL_CACHE/lazaruskit`` or ~/.lazaruskit/cache):
        - <version>-<arch>-<os>/ : One cache entry per cache key
"""

import os
from pathlib import Path
from typing import Optional

from lazaruskit.core.exceptions import ConfigError


def get_global_cache_dir() -> Path:
    """
    Get the platform-specific per-user LazarusKit directory.

    Returns:
        - Windows: %LOCALAPPDATA%\\lazaruskit (falls back to ~/AppData/Local)
        - Linux/macOS: ~/.lazaruskit
    """
    if os.name == "nt":
        local_app_data = os.environ.get("LOCALAPPDATA")
        base = Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
        return base / "lazaruskit"
    return Path.home() / ".lazaruskit"


def get_installer_cache_dir(override: Optional[Path] = None) -> Path:
    """
    Resolve the root directory of the installer cache.

    Args:
        override: Explicitly configured directory, used as-is when given
    """
    if override:
        return Path(override)
    tool_cache = os.environ.get("RUNNER_TOOL_CACHE")
    if tool_cache:
        return Path(tool_cache) / "lazaruskit"
    return get_global_cache_dir() / "cache"


def get_temp_dir(override: Optional[Path] = None) -> Path:
    """
    Resolve the runner temp directory.

    Raises:
        ConfigError: If no override is given and RUNNER_TEMP is not defined
    """
    if override:
        return Path(override)
    runner_temp = os.environ.get("RUNNER_TEMP")
    if not runner_temp:
        raise ConfigError("Expected RUNNER_TEMP to be defined")
    return Path(runner_temp)


def get_installers_dir(temp_dir: Path) -> Path:
    """Directory where installer artifacts are downloaded or restored."""
    return Path(temp_dir) / "installers"
