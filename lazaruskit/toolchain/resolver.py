"""
Lazarus version resolution.

Maps a requested Lazarus version to the Free Pascal compiler it ships with
and builds the platform-specific installer file names and download URLs.

Everything here is a pure function of (version, platform): no I/O, no state.
Matching is plain string prefix/equality comparison, never numeric parsing.

Example:
    >>> from lazaruskit.core.platform import PlatformInfo
    >>> find_fpc_version("2.0.12")
    '3.2.0'
    >>> artifact_names("2.2.6", PlatformInfo("windows", "x64")).laz
    'lazarus-2.2.6-fpc-3.2.2-win64.exe'
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from lazaruskit.core.exceptions import UnsupportedPlatformError, UnsupportedVersionError
from lazaruskit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

STABLE_VERSION = "4.2"
"""Version installed for the 'stable' alias (and for 'dist' on Windows)."""

DEFAULT_FPC_VERSION = "3.2.2"

STABLE_ALIAS = "stable"
DIST_ALIAS = "dist"
ALIASES = (STABLE_ALIAS, DIST_ALIAS)

PACKAGE_KINDS = ("fpcsrc", "fpc", "laz")

SOURCEFORGE_URL = "https://sourceforge.net/projects/lazarus/files"

# (match kind, pattern, FPC version), evaluated top to bottom
FPC_VERSION_RULES: Tuple[Tuple[str, str, str], ...] = (
    ("prefix", "2.0.1", "3.2.0"),  # 2.0.10 and 2.0.12
    ("prefix", "2.0.", "3.0.4"),
    ("prefix", "1.8", "3.0.4"),
    ("exact", "1.6.4", "3.0.2"),
    ("prefix", "1.6", "3.0.0"),
    ("exact", "1.2.0", "2.6.2"),
    ("prefix", "1.0", "2.6.2"),
    ("prefix", "1.4", "2.6.4"),
    ("prefix", "1.2", "2.6.4"),
)

# Debian package release suffixes, keyed by FPC version
DEB_FPC_SUFFIXES = {
    "3.2.2": "210709",
    "3.2.0": "1",
    "3.0.4": "2",
    "3.0.2": "170225",
    "3.0.0": "151205",
    "2.6.2": "0",
}

MACOS_FPC_SUFFIXES = {
    "3.2.0": "2",
    "3.2.2": "20210709",
}

# 2.0.8 was packaged under different names than every other macOS release
MACOS_2_0_8_ARTIFACTS = {
    "laz": "LazarusIDE-2.0.8-macos-x86_64.pkg",
    "fpc": "fpc-3.0.4-macos-x86_64-laz-2.dmg",
    "fpcsrc": "fpc-src-3.0.4-laz.pkg",
}

_DOTTED_VERSION = re.compile(r"^\d+(\.\d+)*$")


@dataclass(frozen=True)
class ArtifactSet:
    """
    Installer file names for one Lazarus release on one platform.

    Windows ships a single self-extracting installer bundling FPC, so only
    ``laz`` is set there.
    """

    fpc_version: str
    laz: str
    fpc: Optional[str] = None
    fpcsrc: Optional[str] = None

    def get(self, kind: str) -> str:
        """
        Look up the file name for a package kind ('laz', 'fpc', 'fpcsrc').

        Raises:
            KeyError: If kind is unknown or has no artifact on this platform
        """
        if kind not in PACKAGE_KINDS:
            raise KeyError(f"Unknown package kind: {kind}")
        name = getattr(self, kind)
        if name is None:
            raise KeyError(f"No '{kind}' artifact for this platform")
        return name


def _rule_matches(kind: str, pattern: str, version: str) -> bool:
    if kind == "exact":
        return version == pattern
    return version.startswith(pattern)


def find_fpc_version(lazarus_version: str, strict: bool = False) -> str:
    """
    Find the Free Pascal version bundled with a Lazarus release.

    Args:
        lazarus_version: Lazarus version, e.g. '2.0.12'
        strict: Reject input that matches no rule and isn't a dotted version

    Returns:
        FPC version string; DEFAULT_FPC_VERSION when no rule matches

    Raises:
        UnsupportedVersionError: In strict mode, for malformed versions
    """
    for kind, pattern, fpc_version in FPC_VERSION_RULES:
        if _rule_matches(kind, pattern, lazarus_version):
            return fpc_version

    if strict and not _DOTTED_VERSION.match(lazarus_version):
        raise UnsupportedVersionError(
            f"Unrecognized Lazarus version: '{lazarus_version}'"
        )

    logger.debug(
        f"No FPC rule for Lazarus {lazarus_version}, using {DEFAULT_FPC_VERSION}"
    )
    return DEFAULT_FPC_VERSION


def fpc_version_suffix(lazarus_version: str, fpc_version: str, os_name: str) -> str:
    """Packaging release suffix used in FPC file names."""
    if os_name == "macos":
        # Older FPC releases are not installable on current macOS runners
        return MACOS_FPC_SUFFIXES.get(fpc_version, "")

    if fpc_version == "2.6.4":
        if lazarus_version.startswith("1.2.") and lazarus_version != "1.2.0":
            return "140420"
        return "150228"
    return DEB_FPC_SUFFIXES.get(fpc_version, "")


def windows_target(platform: PlatformInfo) -> str:
    """Installer flavor for Windows: 'win64' or 'win32'."""
    return "win64" if platform.is_64bit else "win32"


def artifact_names(
    lazarus_version: str, platform: PlatformInfo, strict: bool = False
) -> ArtifactSet:
    """
    Build installer file names for a Lazarus release.

    Args:
        lazarus_version: Concrete Lazarus version (aliases already resolved)
        platform: Target platform
        strict: Passed through to find_fpc_version()

    Raises:
        UnsupportedPlatformError: If the OS has no Lazarus installers
    """
    ver = lazarus_version
    fpc = find_fpc_version(ver, strict=strict)

    if platform.os == "windows":
        return ArtifactSet(
            fpc_version=fpc, laz=f"lazarus-{ver}-fpc-{fpc}-{windows_target(platform)}.exe"
        )

    suffix = fpc_version_suffix(ver, fpc, platform.os)

    if platform.os == "macos":
        if ver == "2.0.8":
            return ArtifactSet(fpc_version="3.0.4", **MACOS_2_0_8_ARTIFACTS)
        intel = "" if fpc.startswith("2.0") else "arm64"
        src_ext = "pkg" if ver.startswith("2.0") else "dmg"
        return ArtifactSet(
            fpc_version=fpc,
            laz=f"Lazarus-{ver}-macosx-darwin.pkg",
            fpc=f"fpc-{fpc}.intel{intel}-macosx.dmg",
            fpcsrc=f"fpc-src-{fpc}-{suffix}-laz.{src_ext}",
        )

    if platform.os == "linux":
        separator = "-laz-" if ver.startswith("1.") else "_"
        release = "1" if fpc == "3.0.4" else suffix
        return ArtifactSet(
            fpc_version=fpc,
            laz=f"lazarus-project_{ver}-0_amd64.deb",
            fpc=f"fpc{separator}{fpc}-{release}_amd64.deb",
            fpcsrc=f"fpc-src_{fpc}-{suffix}_amd64.deb",
        )

    raise UnsupportedPlatformError(platform.os, "artifact_names")


def package_folder_url(lazarus_version: str, platform: PlatformInfo) -> str:
    """SourceForge folder holding the installers of one Lazarus release."""
    if platform.os == "windows":
        bits = "64" if platform.is_64bit else "32"
        folder = f"Lazarus%20Windows%20{bits}%20bits"
    elif platform.os == "linux":
        folder = "Lazarus%20Linux%20amd64%20DEB"
    elif platform.os == "macos":
        folder = "Lazarus%20macOS%20x86-64"
    else:
        raise UnsupportedPlatformError(platform.os, "package_folder_url")
    return f"{SOURCEFORGE_URL}/{folder}/Lazarus%20{lazarus_version}/"


def package_url(
    lazarus_version: str, platform: PlatformInfo, kind: str = "laz", strict: bool = False
) -> str:
    """
    Download URL of one installer artifact.

    Args:
        lazarus_version: Concrete Lazarus version
        platform: Target platform
        kind: 'laz', 'fpc' or 'fpcsrc' (Windows only has 'laz')
    """
    names = artifact_names(lazarus_version, platform, strict=strict)
    return package_folder_url(lazarus_version, platform) + names.get(kind)


def required_kinds(platform: PlatformInfo) -> Tuple[str, ...]:
    """Package kinds installed on a platform, in installation order."""
    if platform.os == "windows":
        return ("laz",)
    return PACKAGE_KINDS


def resolve_alias(lazarus_version: str, platform: PlatformInfo) -> str:
    """
    Turn a requested version into the version whose installers get downloaded.

    'stable' always becomes STABLE_VERSION; 'dist' does so only on Windows,
    since on Linux it means the distribution's own package and needs no
    versioned download. Concrete versions are returned unchanged.
    """
    if lazarus_version == STABLE_ALIAS:
        return STABLE_VERSION
    if lazarus_version == DIST_ALIAS and platform.os == "windows":
        return STABLE_VERSION
    return lazarus_version
