"""
Core functionality for LazarusKit.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformInfo,
    detect_platform,
    is_supported_platform,
    clear_platform_cache,
)

from .directory import (
    get_global_cache_dir,
    get_installer_cache_dir,
    get_temp_dir,
    get_installers_dir,
)

from .exceptions import (
    LazarusKitError,
    ConfigError,
    UnsupportedPlatformError,
    UnsupportedVersionError,
    DownloadError,
    InstallCommandError,
    MissingArtifactError,
    CacheError,
    PackageError,
    PackageNotFoundError,
)

__all__ = [
    "PlatformInfo",
    "detect_platform",
    "is_supported_platform",
    "clear_platform_cache",
    "get_global_cache_dir",
    "get_installer_cache_dir",
    "get_temp_dir",
    "get_installers_dir",
    "LazarusKitError",
    "ConfigError",
    "UnsupportedPlatformError",
    "UnsupportedVersionError",
    "DownloadError",
    "InstallCommandError",
    "MissingArtifactError",
    "CacheError",
    "PackageError",
    "PackageNotFoundError",
]
