"""
Lazarus toolchain installation.

This package resolves Lazarus versions to installer artifacts, caches those
artifacts between runs, and drives the platform-specific installation.

Main Components:
    - resolver: Lazarus version -> FPC version, file names and URLs
    - cache: Installer artifact cache keyed by version/arch/os
    - installer: Per-platform installation procedures

Example:
    >>> from lazaruskit.toolchain import LazarusInstaller
    >>> installer = LazarusInstaller("stable", with_cache=True)
    >>> installer.install_lazarus()
"""

from lazaruskit.toolchain.resolver import (
    ArtifactSet,
    STABLE_VERSION,
    DEFAULT_FPC_VERSION,
    find_fpc_version,
    artifact_names,
    package_url,
    resolve_alias,
)
from lazaruskit.toolchain.cache import InstallerCache, cache_key
from lazaruskit.toolchain.installer import (
    Installer,
    LazarusInstaller,
    LinuxInstaller,
    MacOSInstaller,
    WindowsInstaller,
)

__all__ = [
    "ArtifactSet",
    "STABLE_VERSION",
    "DEFAULT_FPC_VERSION",
    "find_fpc_version",
    "artifact_names",
    "package_url",
    "resolve_alias",
    "InstallerCache",
    "cache_key",
    "Installer",
    "LazarusInstaller",
    "LinuxInstaller",
    "MacOSInstaller",
    "WindowsInstaller",
]
