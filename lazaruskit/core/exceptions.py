"""
Centralized exception hierarchy for LazarusKit.

Every failure during an installation run surfaces as one of these
exceptions and terminates the run. Nothing here is retried or recovered
locally.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class LazarusKitError(Exception):
    """Base exception for all LazarusKit errors."""

    pass


class ConfigError(LazarusKitError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Configuration Support Exceptions
# ============================================================================


class UnsupportedPlatformError(LazarusKitError):
    """Raised when the host operating system is not supported."""

    def __init__(self, platform: str, context: str = ""):
        self.platform = platform
        msg = f"Platform not supported: {platform}"
        if context:
            msg = f"{context} - {msg}"
        super().__init__(msg)


class UnsupportedVersionError(LazarusKitError):
    """Raised when a Lazarus version cannot be installed on this platform."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class DownloadError(LazarusKitError):
    """Exception raised when a download fails."""

    pass


class InstallCommandError(LazarusKitError):
    """Raised when an install command exits with an error."""

    def __init__(self, command: list, returncode: int, detail: str = ""):
        self.command = list(command)
        self.returncode = returncode
        msg = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if detail:
            msg += f"\n{detail}"
        super().__init__(msg)


class MissingArtifactError(LazarusKitError):
    """Raised when an expected file is missing after an install step."""

    pass


class CacheError(LazarusKitError):
    """Raised when the installer cache cannot be read or written."""

    pass


# ============================================================================
# Package Exceptions
# ============================================================================


class PackageError(LazarusKitError):
    """Base exception for Online Package Manager errors."""

    pass


class PackageNotFoundError(PackageError):
    """Raised when a requested package is not in the package list."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        super().__init__(f"Package not found in repository: {package_name}")
