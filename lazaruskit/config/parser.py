"""Installation request configuration for LazarusKit.

An InstallRequest is assembled from up to four layers, highest priority first:

1. Command-line flags
2. GitHub Actions inputs (``INPUT_LAZARUS-VERSION`` etc.)
3. Optional ``lazaruskit.yaml`` file
4. Built-in defaults

Example lazaruskit.yaml:

    lazarus-version: "2.2.6"
    include-packages:
      - BGRABitmap
      - Synapse 40.1
    with-cache: true
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from lazaruskit.core import actions
from lazaruskit.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "lazaruskit.yaml"
DEFAULT_VERSION = "stable"

KNOWN_KEYS = (
    "lazarus-version",
    "include-packages",
    "with-cache",
    "strict-version",
    "cache-dir",
    "temp-dir",
)


@dataclass(frozen=True)
class InstallRequest:
    """
    What to install. Immutable once built.

    Attributes:
        version: Lazarus version, 'stable' or 'dist'
        include_packages: OPM packages to add after Lazarus is installed
        with_cache: Restore/save installer artifacts from the local cache
        strict_version: Fail on Lazarus versions the resolver does not recognize
        cache_dir: Installer cache root override
        temp_dir: Runner temp directory override
    """

    version: str
    include_packages: Tuple[str, ...] = field(default_factory=tuple)
    with_cache: bool = True
    strict_version: bool = False
    cache_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None

    def __post_init__(self):
        if not self.version or not self.version.strip():
            raise ConfigError("Lazarus version cannot be empty")
        object.__setattr__(self, "version", self.version.strip())
        object.__setattr__(self, "include_packages", tuple(self.include_packages))


def parse_include_packages(value: Union[str, List[str], None]) -> Tuple[str, ...]:
    """
    Parse a package list given as a comma-separated string or a list.

    Example:
        >>> parse_include_packages("BGRABitmap, Synapse 40.1,")
        ('BGRABitmap', 'Synapse 40.1')
    """
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(str(item).strip() for item in items if str(item).strip())


def parse_bool(value: Union[str, bool, None], default: bool = False) -> bool:
    """
    Parse a boolean the way action inputs are compared: only 'true' is true.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and validate a lazaruskit.yaml file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigError: If the file is required but missing, or is invalid
    """
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_file} must be a mapping")

    unknown = sorted(set(data) - set(KNOWN_KEYS))
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

    # Versions like 2.0 are parsed by YAML as floats
    if "lazarus-version" in data and data["lazarus-version"] is not None:
        data["lazarus-version"] = str(data["lazarus-version"])

    return data


def read_action_inputs() -> Dict[str, str]:
    """Collect the action inputs that are set, keyed like the YAML file."""
    inputs = {}
    for key in ("lazarus-version", "include-packages", "with-cache"):
        value = actions.get_input(key)
        if value is not None:
            inputs[key] = value
    return inputs


def build_request(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Optional[Path] = None,
    use_action_inputs: bool = True,
) -> InstallRequest:
    """
    Build an InstallRequest from all configuration layers.

    Args:
        overrides: Highest-priority values (from the CLI); None values are ignored
        config_file: YAML file; when None, ./lazaruskit.yaml is used if present
        use_action_inputs: Read INPUT_* environment variables

    Raises:
        ConfigError: If the resulting request is invalid
    """
    required = config_file is not None
    config_path = config_file if config_file is not None else Path.cwd() / DEFAULT_CONFIG_FILE

    merged: Dict[str, Any] = {}
    merged.update(load_yaml_config(config_path, required=required))
    if use_action_inputs:
        merged.update(read_action_inputs())
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    cache_dir = merged.get("cache-dir")
    temp_dir = merged.get("temp-dir")

    request = InstallRequest(
        version=str(merged.get("lazarus-version") or DEFAULT_VERSION),
        include_packages=parse_include_packages(merged.get("include-packages")),
        with_cache=parse_bool(merged.get("with-cache"), default=True),
        strict_version=parse_bool(merged.get("strict-version"), default=False),
        cache_dir=Path(cache_dir) if cache_dir else None,
        temp_dir=Path(temp_dir) if temp_dir else None,
    )
    logger.debug(f"Install request: {request}")
    return request
