"""
Tests for the installer artifact cache.
"""

import json
import shutil
from unittest.mock import patch

import pytest
from filelock import Timeout

from lazaruskit.core.exceptions import CacheError
from lazaruskit.core.platform import PlatformInfo
from lazaruskit.toolchain.cache import MANIFEST_NAME, InstallerCache, cache_key
from tests.utils.helpers import write_file


@pytest.fixture
def installers_dir(tmp_path):
    return tmp_path / "installers"


@pytest.fixture
def cache_root(tmp_path):
    return tmp_path / "cache"


class TestCacheKey:
    """Tests for cache key composition."""

    def test_key_format(self):
        assert cache_key("2.2.6", PlatformInfo("linux", "x64")) == "2.2.6-x64-linux"

    def test_key_includes_arch(self):
        assert cache_key("2.2.6", PlatformInfo("windows", "x86")) == "2.2.6-x86-windows"


class TestDisabledCache:
    """Tests for a cache that is switched off."""

    def test_restore_returns_false(self, installers_dir, cache_root):
        cache = InstallerCache(False, "2.2.6-x64-linux", cache_root=cache_root)

        assert cache.restore(installers_dir) is False
        assert not cache_root.exists()

    def test_save_does_nothing(self, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        cache = InstallerCache(False, "2.2.6-x64-linux", cache_root=cache_root)

        assert cache.save(installers_dir) is False
        assert not cache_root.exists()


class TestSaveAndRestore:
    """Tests for writing and reading cache entries."""

    def test_miss_on_empty_cache(self, installers_dir, cache_root):
        cache = InstallerCache(True, "2.2.6-x64-linux", cache_root=cache_root)
        assert cache.restore(installers_dir) is False

    def test_save_then_restore(self, tmp_path, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb", b"fpc")
        write_file(installers_dir / "lazarus.deb", b"laz")
        cache = InstallerCache(True, "2.2.6-x64-linux", cache_root=cache_root)

        assert cache.save(installers_dir) is True

        target = tmp_path / "fresh"
        assert cache.restore(target) is True
        assert (target / "fpc.deb").read_bytes() == b"fpc"
        assert (target / "lazarus.deb").read_bytes() == b"laz"

    def test_manifest_lists_files(self, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        cache = InstallerCache(True, "k", cache_root=cache_root)
        cache.save(installers_dir)

        manifest = json.loads((cache_root / "k" / MANIFEST_NAME).read_text())
        assert manifest == {"key": "k", "files": ["fpc.deb"]}

    def test_save_skips_subdirectories(self, installers_dir, cache_root):
        """Test an installed Lazarus tree next to the installer is not cached."""
        write_file(installers_dir / "lazarus-2.2.6.exe")
        write_file(installers_dir / "lazarus" / "lazarus.exe")
        cache = InstallerCache(True, "2.2.6-x64-windows", cache_root=cache_root)

        cache.save(installers_dir)

        entry = cache_root / "2.2.6-x64-windows"
        assert (entry / "lazarus-2.2.6.exe").exists()
        assert not (entry / "lazarus").exists()

    def test_save_keeps_existing_entry(self, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb", b"first")
        cache = InstallerCache(True, "k", cache_root=cache_root)
        assert cache.save(installers_dir) is True

        write_file(installers_dir / "fpc.deb", b"second")
        assert cache.save(installers_dir) is False
        assert (cache_root / "k" / "fpc.deb").read_bytes() == b"first"

    def test_save_without_files(self, installers_dir, cache_root):
        cache = InstallerCache(True, "k", cache_root=cache_root)
        assert cache.save(installers_dir) is False

    def test_keys_are_independent(self, tmp_path, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        InstallerCache(True, "2.2.6-x64-linux", cache_root=cache_root).save(installers_dir)

        other = InstallerCache(True, "2.2.4-x64-linux", cache_root=cache_root)
        assert other.restore(tmp_path / "other") is False


class TestIncompleteEntries:
    """Tests for damaged cache entries."""

    def test_missing_file_is_a_miss(self, tmp_path, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        cache = InstallerCache(True, "k", cache_root=cache_root)
        cache.save(installers_dir)
        (cache_root / "k" / "fpc.deb").unlink()

        assert cache.restore(tmp_path / "restore") is False

    def test_corrupt_manifest_is_a_miss(self, tmp_path, cache_root):
        write_file(cache_root / "k" / MANIFEST_NAME, b"{not json")
        cache = InstallerCache(True, "k", cache_root=cache_root)

        assert cache.restore(tmp_path / "restore") is False

    def test_files_without_manifest_is_a_miss(self, tmp_path, cache_root):
        """Test a partially written entry is never restored."""
        write_file(cache_root / "k" / "fpc.deb")
        cache = InstallerCache(True, "k", cache_root=cache_root)

        assert cache.restore(tmp_path / "restore") is False


class TestCacheRoot:
    """Tests for default cache root resolution."""

    def test_uses_runner_tool_cache(self, runner_env):
        cache = InstallerCache(True, "k")
        assert cache.cache_root == runner_env["tool_cache"] / "lazaruskit"


class TestCacheFailures:
    """Tests for cache I/O problems, which never fail the run."""

    def test_restore_with_unusable_root(self, tmp_path, installers_dir):
        root = write_file(tmp_path / "not_a_directory")
        cache = InstallerCache(True, "2.2.6-x64-linux", cache_root=root)

        assert cache.restore(installers_dir) is False

    def test_save_with_unusable_root(self, tmp_path, installers_dir):
        write_file(installers_dir / "fpc.deb")
        root = write_file(tmp_path / "not_a_directory")
        cache = InstallerCache(True, "2.2.6-x64-linux", cache_root=root)

        assert cache.save(installers_dir) is False

    def test_lock_timeout_is_a_miss(self, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        cache = InstallerCache(True, "k", cache_root=cache_root)
        cache.save(installers_dir)

        with patch("lazaruskit.toolchain.cache.FileLock") as mock_lock:
            mock_lock.return_value.__enter__.side_effect = Timeout(str(cache_root / "k.lock"))
            assert cache.restore(installers_dir) is False
            assert cache.save(installers_dir) is False

    def test_failed_restore_removes_copied_files(self, tmp_path, installers_dir, cache_root):
        write_file(installers_dir / "fpc.deb")
        write_file(installers_dir / "lazarus.deb")
        cache = InstallerCache(True, "k", cache_root=cache_root)
        cache.save(installers_dir)
        target = tmp_path / "restore"

        real_copy = shutil.copy2
        copied = []

        def copy_then_fail(src, dst):
            if copied:
                raise OSError("No space left on device")
            copied.append(dst)
            return real_copy(src, dst)

        with patch("lazaruskit.toolchain.cache.shutil.copy2", side_effect=copy_then_fail):
            assert cache.restore(target) is False

        assert list(target.iterdir()) == []


class TestCacheKeyValidation:
    """Tests for keys that would point outside the cache root."""

    @pytest.mark.parametrize("version", ["../../escaped", "a/b", "..\\escaped"])
    def test_path_in_version_rejected(self, tmp_path, installers_dir, linux_x64, version):
        cache = InstallerCache(True, cache_key(version, linux_x64), cache_root=tmp_path / "root")

        with pytest.raises(CacheError, match="Invalid cache key"):
            cache.restore(installers_dir)

        assert not (tmp_path / "escaped-x64-linux").exists()

    def test_unset_key_rejected(self, cache_root):
        with pytest.raises(CacheError, match="not set"):
            InstallerCache(True, cache_root=cache_root).entry_dir
