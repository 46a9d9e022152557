"""
Platform detection for LazarusKit.

This module detects the current operating system and CPU architecture so the
installer can pick the right Lazarus and Free Pascal artifacts.

Usage:
    from lazaruskit.core.platform import detect_platform, is_supported_platform

    platform_info = detect_platform()
    print(f"Platform string: {platform_info.platform_string()}")

    if is_supported_platform(platform_info):
        print("Platform is supported!")
"""

import platform
import functools
from dataclasses import dataclass
from typing import Optional

SUPPORTED_OS = ("linux", "windows", "macos")


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('linux', 'windows', 'macos'), or the raw
            lower-cased system name when unrecognized
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
        os_version: OS version string (e.g., '10.0.19041', '14.1')
    """

    os: str
    arch: str
    os_version: str = ""

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def is_64bit(self) -> bool:
        """True for 64-bit x86 hosts."""
        return self.arch == "x64"

    def __str__(self) -> str:
        if self.os_version:
            return f"{self.platform_string()} v{self.os_version}"
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(
        os=_detect_os(), arch=_detect_architecture(), os_version=_detect_os_version()
    )


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the raw
        lower-cased system name for anything else
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    # Return original for unknown architectures
    return machine


def _detect_os_version() -> str:
    system = platform.system().lower()

    if system == "windows":
        return platform.version()
    elif system == "darwin":
        version = platform.mac_ver()[0]
        return version if version else "unknown"
    return platform.release()


def is_supported_platform(info: Optional[PlatformInfo] = None) -> bool:
    """
    Check if LazarusKit can install onto the platform.

    Args:
        info: PlatformInfo to check. If None, detects current platform.
    """
    if info is None:
        info = detect_platform()

    return info.os in SUPPORTED_OS


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "SUPPORTED_OS",
    "detect_platform",
    "is_supported_platform",
    "clear_platform_cache",
]
