"""
Lazarus installation driver.

Installs a Lazarus release and its Free Pascal compiler onto a CI runner:

1. Resolve 'stable' / 'dist' aliases and reject unsupported combinations
2. Restore installer artifacts from the cache when possible
3. Download each missing artifact (compiler source, compiler, IDE)
4. Run the OS-native installer for each of them
5. Fix up the environment (lazbuild symlink on macOS, PATH/FPCDIR on Windows)

Each platform is a straight-line procedure in its own class; the host
platform selects one of them once. Any failing step aborts the run. Nothing
is rolled back or retried.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Type

from lazaruskit.config.parser import InstallRequest
from lazaruskit.core import actions
from lazaruskit.core.directory import get_installers_dir, get_temp_dir
from lazaruskit.core.download import download_file
from lazaruskit.core.exceptions import (
    MissingArtifactError,
    UnsupportedPlatformError,
    UnsupportedVersionError,
)
from lazaruskit.core.platform import PlatformInfo, detect_platform
from lazaruskit.core.process import run_command
from lazaruskit.packages.opm import OnlinePackageManager
from lazaruskit.toolchain.cache import InstallerCache, cache_key
from lazaruskit.toolchain.resolver import (
    DIST_ALIAS,
    STABLE_ALIAS,
    artifact_names,
    package_url,
    resolve_alias,
    windows_target,
)

logger = logging.getLogger(__name__)


class PlatformInstaller(ABC):
    """
    Installation procedure for one operating system.

    Attributes:
        platform: Host platform
        installers_dir: Where installer artifacts are downloaded or restored
        strict: Reject Lazarus versions the resolver does not recognize
    """

    os_name: str = ""

    def __init__(self, platform: PlatformInfo, installers_dir: Path, strict: bool = False):
        self.platform = platform
        self.installers_dir = Path(installers_dir)
        self.strict = strict

    @property
    def lazarus_dir(self) -> Optional[Path]:
        """Lazarus installation directory when chosen by us, None for system locations."""
        return None

    def check_version(self, version: str) -> None:
        """Reject versions that cannot be installed on this platform."""

    def install_dist(self) -> None:
        """Install the Lazarus package shipped by the operating system."""
        raise UnsupportedPlatformError(self.platform.os, "install_dist")

    @abstractmethod
    def install_version(self, version: str, cache_restored: bool) -> None:
        """Download (unless cache_restored) and install a concrete Lazarus version."""

    def fetch(self, version: str, kind: str, local_name: str, cache_restored: bool) -> Path:
        """
        Get one installer artifact into installers_dir.

        Args:
            version: Concrete Lazarus version
            kind: 'laz', 'fpc' or 'fpcsrc'
            local_name: File name inside installers_dir
            cache_restored: Reuse the restored file instead of downloading

        Raises:
            DownloadError: If the download fails
            MissingArtifactError: If the cache was restored without this file
        """
        url = package_url(version, self.platform, kind, strict=self.strict)
        destination = self.installers_dir / local_name
        logger.info(f"Downloading {url}")

        if cache_restored:
            if not destination.is_file():
                raise MissingArtifactError(
                    f"Cache was restored but {destination} is missing"
                )
            logger.info(f"Using cache restored into {destination}")
            return destination

        download_file(url, destination)
        logger.info(f"Downloaded into {destination}")
        return destination


class LinuxInstaller(PlatformInstaller):
    """Debian packages installed with apt."""

    os_name = "linux"

    PACKAGES = (
        ("fpcsrc", "fpcsrc.deb"),
        ("fpc", "fpc.deb"),
        ("laz", "lazarus.deb"),
    )

    def install_dist(self) -> None:
        run_command(["sudo", "apt", "update"])
        run_command(["sudo", "apt", "install", "-y", "lazarus", "--no-install-recommends"])

    def install_version(self, version: str, cache_restored: bool) -> None:
        run_command(["sudo", "apt", "update"])

        for kind, local_name in self.PACKAGES:
            deb = self.fetch(version, kind, local_name, cache_restored)
            run_command(["sudo", "apt", "install", "-y", str(deb)])


class WindowsInstaller(PlatformInstaller):
    """Silent run of the self-extracting Lazarus installer."""

    os_name = "windows"

    @property
    def lazarus_dir(self) -> Path:
        return self.installers_dir / "lazarus"

    def install_version(self, version: str, cache_restored: bool) -> None:
        exe = self.fetch(version, "laz", f"lazarus-{version}.exe", cache_restored)

        lazarus_dir = self.lazarus_dir
        run_command([str(exe), "/VERYSILENT", "/SP-", f"/DIR={lazarus_dir}"])

        actions.add_path(lazarus_dir)
        logger.info(f"Adding '{lazarus_dir}' to PATH")

        fpc_version = artifact_names(version, self.platform, strict=self.strict).fpc_version
        fpc_root = lazarus_dir / "fpc" / fpc_version
        cpu = "x86_64" if self.platform.is_64bit else "i386"
        fpc_bin = fpc_root / "bin" / f"{cpu}-{windows_target(self.platform)}"
        actions.add_path(fpc_bin)
        logger.info(f"Added '{fpc_bin}' to PATH")

        # fpmake looks for units under %FPCDIR%\units\<target>\<package>
        actions.export_variable("FPCDIR", fpc_root)


class MacOSInstaller(PlatformInstaller):
    """Installer packages, either plain or inside disk images."""

    os_name = "macos"

    PACKAGES = (
        ("fpcsrc", "fpcsrc"),
        ("fpc", "fpc"),
        ("laz", "lazarus"),
    )

    volumes_root = Path("/Volumes")
    lazbuild_library_path = Path("/Library/Lazarus/lazbuild")
    lazbuild_application_path = Path("/Applications/Lazarus/lazbuild")
    lazbuild_link = Path("/usr/local/bin/lazbuild")

    def check_version(self, version: str) -> None:
        if (version.startswith("2.0") and version != "2.0.8") or version.startswith("1."):
            raise UnsupportedVersionError(
                "GitHub runners do not support Lazarus below 2.0.8 on macos"
            )

    def install_version(self, version: str, cache_restored: bool) -> None:
        for kind, base_name in self.PACKAGES:
            url = package_url(version, self.platform, kind, strict=self.strict)
            extension = ".dmg" if url.endswith(".dmg") else ".pkg"
            path = self.fetch(version, kind, base_name + extension, cache_restored)

            if extension == ".dmg":
                self._install_disk_image(path, base_name)
            else:
                self._install_package(path)

        self._fix_lazbuild_symlink()

    def _list_volumes(self) -> List[str]:
        if not self.volumes_root.is_dir():
            return []
        return sorted(entry.name for entry in self.volumes_root.iterdir())

    def _install_package(self, package: Path) -> None:
        run_command(["sudo", "installer", "-package", str(package), "-target", "/"])

    def _install_disk_image(self, image: Path, volume_prefix: str) -> None:
        before = set(self._list_volumes())
        run_command(["sudo", "hdiutil", "attach", str(image)])
        after = self._list_volumes()

        candidates = [name for name in after if name not in before]
        if not candidates:
            # Image was already mounted by an earlier run
            candidates = [name for name in after if name.startswith(volume_prefix)]
        if not candidates:
            raise MissingArtifactError(
                f"No volume mounted from {image} under {self.volumes_root}"
            )

        volume = self.volumes_root / candidates[0]
        package = self._find_package(volume)
        self._install_package(package)

    @staticmethod
    def _find_package(volume: Path) -> Path:
        for pattern in ("*.pkg", "*.mpkg"):
            found = sorted(volume.glob(pattern))
            if found:
                return found[0]
        raise MissingArtifactError(f"No installer package found in {volume}")

    def _fix_lazbuild_symlink(self) -> None:
        # Before 2.0.12 lazbuild lives in /Library/Lazarus, from 2.0.12 on in /Applications/Lazarus
        if self.lazbuild_library_path.exists():
            logger.info("Do not need to update lazbuild symlink")
        elif self.lazbuild_application_path.exists():
            logger.info(f"Updating lazbuild symlink to {self.lazbuild_application_path}")
            run_command(["rm", "-rf", str(self.lazbuild_link)])
            run_command(["ln", "-s", str(self.lazbuild_application_path), str(self.lazbuild_link)])
        else:
            raise MissingArtifactError(
                f"Could not find lazbuild in {self.lazbuild_library_path} "
                f"or {self.lazbuild_application_path}"
            )


PLATFORM_INSTALLERS: Dict[str, Type[PlatformInstaller]] = {
    cls.os_name: cls for cls in (LinuxInstaller, WindowsInstaller, MacOSInstaller)
}


class LazarusInstaller:
    """
    Installs Lazarus and Free Pascal for one requested version.

    Example:
        >>> installer = LazarusInstaller("2.2.6", with_cache=True)
        >>> installer.install_lazarus()
        >>> installer.save_cache()
    """

    def __init__(
        self,
        version: str,
        with_cache: bool,
        platform: Optional[PlatformInfo] = None,
        temp_dir: Optional[Path] = None,
        cache_root: Optional[Path] = None,
        strict: bool = False,
    ):
        """
        Initialize Lazarus installer.

        Args:
            version: Lazarus version, 'stable' or 'dist'
            with_cache: Use the installer cache
            platform: Target platform (default: detected host)
            temp_dir: Runner temp directory (default: $RUNNER_TEMP)
            cache_root: Installer cache root (default: see get_installer_cache_dir)
            strict: Reject Lazarus versions the resolver does not recognize

        Raises:
            UnsupportedPlatformError: If the platform has no installer
            ConfigError: If no temp directory can be determined
        """
        self.platform = platform or detect_platform()
        self.version = version
        self.installers_dir = get_installers_dir(get_temp_dir(temp_dir))
        self.cache = InstallerCache(
            with_cache, cache_key(version, self.platform), cache_root=cache_root
        )

        installer_cls = PLATFORM_INSTALLERS.get(self.platform.os)
        if installer_cls is None:
            raise UnsupportedPlatformError(self.platform.os, "install_lazarus")
        self.backend = installer_cls(self.platform, self.installers_dir, strict=strict)

    @property
    def lazarus_dir(self) -> Optional[Path]:
        return self.backend.lazarus_dir

    def _set_version(self, version: str) -> None:
        self.version = version
        self.cache.key = cache_key(version, self.platform)

    def install_lazarus(self) -> None:
        """
        Install the requested Lazarus version.

        Raises:
            UnsupportedPlatformError: 'dist' requested where no system package exists
            UnsupportedVersionError: Version not installable on this platform
            DownloadError: If an artifact download fails
            InstallCommandError: If an install command fails
            MissingArtifactError: If an expected file is missing after a step
        """
        logger.info(
            f"Installing Lazarus {self.version} on platform: "
            f'"{self.platform.os}"; arch: "{self.platform.arch}"'
        )

        if self.version == DIST_ALIAS and self.platform.os != "windows":
            self.backend.install_dist()
            return

        if self.version in (STABLE_ALIAS, DIST_ALIAS):
            self._set_version(resolve_alias(self.version, self.platform))
        else:
            self.backend.check_version(self.version)

        cache_restored = self.cache.restore(self.installers_dir)
        self.backend.install_version(self.version, cache_restored)

    def save_cache(self) -> bool:
        """Store downloaded installers under the current cache key."""
        return self.cache.save(self.installers_dir)


class Installer:
    """
    Full installation run: Lazarus, then extra packages, then cache save.

    Example:
        >>> request = InstallRequest("stable", ["BGRABitmap"], with_cache=True)
        >>> Installer(request).install()
    """

    def __init__(self, request: InstallRequest, platform: Optional[PlatformInfo] = None):
        """
        Initialize installer.

        Args:
            request: InstallRequest describing what to install
            platform: Target platform (default: detected host)
        """
        self.request = request
        self.platform = platform or detect_platform()
        self.temp_dir = get_temp_dir(request.temp_dir)
        self.lazarus = LazarusInstaller(
            request.version,
            request.with_cache,
            platform=self.platform,
            temp_dir=self.temp_dir,
            cache_root=request.cache_dir,
            strict=request.strict_version,
        )

    def install(self) -> None:
        with actions.group(f"Installing Lazarus {self.request.version}"):
            self.lazarus.install_lazarus()

        if self.request.include_packages:
            with actions.group("Installing packages"):
                manager = OnlinePackageManager(
                    self.platform, self.temp_dir, lazarus_dir=self.lazarus.lazarus_dir
                )
                manager.install(self.request.include_packages)

        self.lazarus.save_cache()
