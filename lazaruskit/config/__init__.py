"""Configuration module for LazarusKit.

Builds the installation request from CLI flags, action inputs and an optional
lazaruskit.yaml file.
"""

from lazaruskit.config.parser import (
    InstallRequest,
    build_request,
    load_yaml_config,
    parse_bool,
    parse_include_packages,
    read_action_inputs,
    DEFAULT_CONFIG_FILE,
    DEFAULT_VERSION,
)
from lazaruskit.core.exceptions import ConfigError

__all__ = [
    "InstallRequest",
    "ConfigError",
    "build_request",
    "load_yaml_config",
    "parse_bool",
    "parse_include_packages",
    "read_action_inputs",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_VERSION",
]
