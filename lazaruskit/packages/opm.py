"""
Lazarus Online Package Manager (OPM) integration.

Installs extra Lazarus packages requested through ``include-packages``.
Each package is downloaded from the OPM repository, unpacked where the IDE's
own package manager would put it, and linked into Lazarus with
``lazbuild --add-package-link``.

Package dependencies are not resolved: every package the project needs has
to be listed explicitly.

Repository index (``packagelist.json``) layout::

    {
      "PackageData0": {"Name": "BGRABitmap", "DisplayName": "BGRA Bitmap",
                       "RepositoryFileName": "BGRABitmap.zip", ...},
      "PackageFiles0": [{"Name": "bgrabitmappack.lpk",
                         "PackageRelativePath": "bgrabitmap/", ...}],
      ...
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from lazaruskit.core.download import download_file
from lazaruskit.core.exceptions import PackageError, PackageNotFoundError
from lazaruskit.core.filesystem import extract_zip, safe_rmtree
from lazaruskit.core.platform import PlatformInfo
from lazaruskit.core.process import run_command

logger = logging.getLogger(__name__)

PACKAGE_REPOSITORY_URL = "https://packages.lazarus-ide.org"
PACKAGE_LIST_NAME = "packagelist.json"


@dataclass(frozen=True)
class OPMPackageFile:
    """A single .lpk file inside an OPM package archive."""

    name: str
    relative_path: str = ""

    def path_in(self, package_root: Path) -> Path:
        return package_root / self.relative_path / self.name


@dataclass
class OPMPackage:
    """Repository entry for one OPM package."""

    name: str
    display_name: str
    repository_file_name: str
    files: List[OPMPackageFile] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"{PACKAGE_REPOSITORY_URL}/{self.repository_file_name}"

    def matches(self, requested: str) -> bool:
        requested = requested.lower()
        return requested in (self.name.lower(), self.display_name.lower())


def parse_package_list(data: Dict[str, Any]) -> List[OPMPackage]:
    """
    Parse the decoded packagelist.json into OPMPackage objects.

    Raises:
        PackageError: If the index does not have the expected layout
    """
    if not isinstance(data, dict):
        raise PackageError("Package list is not a JSON object")

    packages = []
    index = 0
    while f"PackageData{index}" in data:
        info = data[f"PackageData{index}"]
        files = data.get(f"PackageFiles{index}") or []
        if not isinstance(info, dict) or "Name" not in info:
            raise PackageError(f"Malformed package entry PackageData{index}")

        packages.append(
            OPMPackage(
                name=info["Name"],
                display_name=info.get("DisplayName") or info["Name"],
                repository_file_name=info.get("RepositoryFileName") or f"{info['Name']}.zip",
                files=[
                    OPMPackageFile(
                        name=entry["Name"],
                        relative_path=entry.get("PackageRelativePath") or "",
                    )
                    for entry in files
                    if isinstance(entry, dict) and entry.get("Name")
                ],
            )
        )
        index += 1

    logger.debug(f"Parsed {len(packages)} packages from package list")
    return packages


def get_packages_dir(platform: PlatformInfo, lazarus_dir: Optional[Path] = None) -> Path:
    """
    Directory where the IDE's package manager keeps downloaded packages.

    On Windows it lives in the config directory of the Lazarus installation,
    elsewhere in the user's ~/.lazarus.
    """
    if platform.os == "windows":
        if lazarus_dir is None:
            raise PackageError("Lazarus directory is required on Windows")
        return Path(lazarus_dir) / "config" / "onlinepackagemanager" / "packages"
    return Path.home() / ".lazarus" / "onlinepackagemanager" / "packages"


def get_lazbuild(platform: PlatformInfo, lazarus_dir: Optional[Path] = None) -> str:
    """lazbuild executable to run."""
    if platform.os == "windows" and lazarus_dir is not None:
        return str(Path(lazarus_dir) / "lazbuild.exe")
    return "lazbuild"


class OnlinePackageManager:
    """
    Installs OPM packages into a Lazarus installation.

    Example:
        >>> manager = OnlinePackageManager(detect_platform(), Path(os.environ["RUNNER_TEMP"]))
        >>> manager.install(["BGRABitmap", "Synapse 40.1"])
    """

    def __init__(
        self,
        platform: PlatformInfo,
        work_dir: Path,
        lazarus_dir: Optional[Path] = None,
    ):
        """
        Initialize package manager.

        Args:
            platform: Host platform
            work_dir: Scratch directory for the index and package archives
            lazarus_dir: Lazarus installation directory, required on Windows
        """
        self.platform = platform
        self.download_dir = Path(work_dir) / "packages"
        self.lazarus_dir = lazarus_dir
        self.packages_dir = get_packages_dir(platform, lazarus_dir)
        self.lazbuild = get_lazbuild(platform, lazarus_dir)
        self._package_list: Optional[List[OPMPackage]] = None

    def fetch_package_list(self) -> List[OPMPackage]:
        """Download and parse the repository index (once per instance)."""
        if self._package_list is None:
            url = f"{PACKAGE_REPOSITORY_URL}/{PACKAGE_LIST_NAME}"
            logger.info(f"Downloading {url}")
            path = download_file(url, self.download_dir / PACKAGE_LIST_NAME)
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise PackageError(f"Invalid package list from {url}: {e}") from e
            self._package_list = parse_package_list(data)
        return self._package_list

    def find_package(self, name: str) -> OPMPackage:
        """
        Look up a package by name or display name, case-insensitively.

        Raises:
            PackageNotFoundError: If no package matches
        """
        for package in self.fetch_package_list():
            if package.matches(name):
                return package
        raise PackageNotFoundError(name)

    def install(self, names: Iterable[str]) -> List[OPMPackage]:
        """
        Install the named packages in the given order.

        Every name is looked up before anything is downloaded, so a typo
        fails the run early.

        Returns:
            Installed packages
        """
        packages = [self.find_package(name) for name in names]
        for package in packages:
            self.install_package(package)
        return packages

    def install_package(self, package: OPMPackage) -> None:
        logger.info(f"Installing package {package.display_name}")

        archive = download_file(package.url, self.download_dir / package.repository_file_name)

        package_root = self.packages_dir / Path(package.repository_file_name).stem
        safe_rmtree(package_root, require_prefix=self.packages_dir)
        extract_zip(archive, self.packages_dir)

        if not package.files:
            logger.warning(f"Package {package.name} lists no .lpk files")

        for package_file in package.files:
            lpk = package_file.path_in(package_root)
            if not lpk.exists():
                # Some archives unpack without a top-level directory
                lpk = package_file.path_in(self.packages_dir)
            logger.info(f"Adding package link {lpk}")
            run_command([self.lazbuild, "--add-package-link", str(lpk)])
