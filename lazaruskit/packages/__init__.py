"""
Lazarus package installation.

Provides the Online Package Manager (OPM) client used to add extra packages
to a freshly installed Lazarus.
"""

from lazaruskit.packages.opm import (
    OPMPackage,
    OPMPackageFile,
    OnlinePackageManager,
    parse_package_list,
    get_packages_dir,
    PACKAGE_REPOSITORY_URL,
)

__all__ = [
    "OPMPackage",
    "OPMPackageFile",
    "OnlinePackageManager",
    "parse_package_list",
    "get_packages_dir",
    "PACKAGE_REPOSITORY_URL",
]
