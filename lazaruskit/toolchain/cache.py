"""
Installer artifact cache.

Keeps downloaded installer files in a local cache directory, one entry per
cache key ``<version>-<arch>-<os>``, so repeated runs can skip the download.

Entries are created after a successful installation and never evicted here;
expiry is left to whatever manages the cache directory. Restored files are
trusted as-is: no checksum is verified.

Entry layout:
    <cache_root>/<key>/
        manifest.json   : {"key": ..., "files": [...]}, written last
        <installer files>
"""

import json
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout

from lazaruskit.core.directory import get_installer_cache_dir
from lazaruskit.core.exceptions import CacheError
from lazaruskit.core.filesystem import atomic_write, iter_files
from lazaruskit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def cache_key(lazarus_version: str, platform: PlatformInfo) -> str:
    """Cache key for a Lazarus version on a platform, e.g. '2.2.6-x64-linux'."""
    return f"{lazarus_version}-{platform.arch}-{platform.os}"


class InstallerCache:
    """
    Best-effort cache of installer artifacts keyed by version and platform.

    Example:
        >>> cache = InstallerCache(True, "2.2.6-x64-linux")
        >>> if not cache.restore(installers_dir):
        ...     download_everything(installers_dir)
        >>> cache.save(installers_dir)
    """

    def __init__(
        self,
        enabled: bool,
        key: str = "",
        cache_root: Optional[Path] = None,
        lock_timeout: int = 60,
    ):
        """
        Initialize installer cache.

        Args:
            enabled: When False, restore() and save() are no-ops
            key: Cache key, see cache_key()
            cache_root: Cache root directory (default: get_installer_cache_dir())
            lock_timeout: Seconds to wait for another process using the entry
        """
        self.enabled = enabled
        self.key = key
        self.cache_root = Path(cache_root) if cache_root else get_installer_cache_dir()
        self.lock_timeout = lock_timeout

    @property
    def entry_dir(self) -> Path:
        """
        Directory of the entry for the current key.

        Raises:
            CacheError: If the key is unset or would leave cache_root
        """
        if not self.key:
            raise CacheError("Cache key is not set")
        if "/" in self.key or "\\" in self.key or self.key in (".", ".."):
            raise CacheError(f"Invalid cache key: {self.key!r}")
        return self.cache_root / self.key

    def _lock(self) -> FileLock:
        entry_dir = self.entry_dir
        self.cache_root.mkdir(parents=True, exist_ok=True)
        return FileLock(self.cache_root / f"{entry_dir.name}.lock", timeout=self.lock_timeout)

    def _read_manifest(self) -> Optional[List[str]]:
        manifest_path = self.entry_dir / MANIFEST_NAME
        if not manifest_path.exists():
            return None
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable cache manifest {manifest_path}: {e}")
            return None
        files = data.get("files")
        if not isinstance(files, list):
            return None
        return [str(name) for name in files]

    def restore(self, installers_dir: Path) -> bool:
        """
        Copy a cached entry into installers_dir.

        Returns:
            True on a cache hit, False on a miss, on a cache I/O failure or
            when caching is disabled
        """
        if not self.enabled:
            return False

        installers_dir = Path(installers_dir)
        copied: List[Path] = []
        try:
            with self._lock():
                files = self._read_manifest()
                if files is None:
                    logger.info(f"Cache not found for key: {self.key}")
                    return False

                missing = [n for n in files if not (self.entry_dir / n).is_file()]
                if missing:
                    logger.warning(
                        f"Cache entry {self.key} is incomplete, missing: {', '.join(missing)}"
                    )
                    return False

                installers_dir.mkdir(parents=True, exist_ok=True)
                for name in files:
                    target = installers_dir / name
                    copied.append(target)
                    shutil.copy2(self.entry_dir / name, target)
        except (Timeout, OSError) as e:
            logger.warning(f"Failed to restore cache entry {self.key}: {e}")
            # Leave no partial set of installers behind
            for target in copied:
                target.unlink(missing_ok=True)
            return False

        logger.info(f"Cache restored from key: {self.key}")
        return True

    def save(self, installers_dir: Path) -> bool:
        """
        Store the installer files of installers_dir under the cache key.

        Only regular files directly inside installers_dir are stored; an
        existing entry is left untouched.

        Returns:
            True if a new entry was written, False when skipped or on a cache
            I/O failure
        """
        if not self.enabled:
            return False

        files = list(iter_files(installers_dir))
        if not files:
            logger.debug(f"No installer files to cache in {installers_dir}")
            return False

        try:
            with self._lock():
                if self._read_manifest() is not None:
                    logger.info(f"Cache entry already exists for key: {self.key}")
                    return False

                self.entry_dir.mkdir(parents=True, exist_ok=True)
                for path in files:
                    shutil.copy2(path, self.entry_dir / path.name)

                manifest = {"key": self.key, "files": [p.name for p in files]}
                atomic_write(self.entry_dir / MANIFEST_NAME, json.dumps(manifest, indent=2))
        except (Timeout, OSError) as e:
            logger.warning(f"Failed to save cache entry {self.key}: {e}")
            return False

        logger.info(f"Cache saved with key: {self.key}")
        return True
