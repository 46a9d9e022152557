"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import pytest
import responses

from lazaruskit.core.download import DownloadProgress, download_file, format_progress
from lazaruskit.core.exceptions import DownloadError

URL = "https://sourceforge.net/projects/lazarus/files/test.deb"


class TestFormatProgress:
    """Test format_progress function."""

    def test_format_with_known_size(self):
        progress = DownloadProgress(
            bytes_downloaded=52428800,
            total_bytes=104857600,
            percentage=50.0,
            speed_bps=1048576,
            eta_seconds=50,
        )

        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s"

    def test_format_with_unknown_size(self):
        progress = DownloadProgress(
            bytes_downloaded=1048576,
            total_bytes=0,
            percentage=0,
            speed_bps=1048576,
            eta_seconds=0,
        )

        assert format_progress(progress) == "1.0 MB at 1.0 MB/s"

    def test_str_uses_format(self):
        progress = DownloadProgress(1048576, 0, 0, 1048576, 0)
        assert str(progress) == format_progress(progress)


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_simple_download(self, tmp_path):
        """Test basic file download."""
        content = b"test content"
        responses.add(responses.GET, URL, body=content)

        dest = tmp_path / "file.deb"
        result = download_file(URL, dest)

        assert result == dest
        assert dest.read_bytes() == content

    @responses.activate
    def test_follows_redirects(self, tmp_path):
        """Test SourceForge style redirects to a mirror."""
        mirror = "https://downloads.sourceforge.net/project/lazarus/test.deb"
        responses.add(responses.GET, URL, status=302, headers={"Location": mirror})
        responses.add(responses.GET, mirror, body=b"from mirror")

        dest = download_file(URL, tmp_path / "file.deb")

        assert dest.read_bytes() == b"from mirror"

    @responses.activate
    def test_download_with_progress_callback(self, tmp_path):
        content = b"x" * 20000
        responses.add(
            responses.GET, URL, body=content, headers={"content-length": str(len(content))}
        )
        updates = []

        download_file(URL, tmp_path / "file.deb", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(content)
        assert updates[-1].percentage == 100.0

    @responses.activate
    def test_creates_destination_directory(self, tmp_path):
        responses.add(responses.GET, URL, body=b"data")

        dest = tmp_path / "installers" / "nested" / "file.deb"
        download_file(URL, dest)

        assert dest.exists()

    @responses.activate
    def test_http_404_error(self, tmp_path):
        responses.add(responses.GET, URL, status=404)
        dest = tmp_path / "file.deb"

        with pytest.raises(DownloadError, match="Failed to download"):
            download_file(URL, dest)

        assert not dest.exists()

    @responses.activate
    def test_no_retry_on_server_error(self, tmp_path):
        """Test a failed request is not repeated."""
        responses.add(responses.GET, URL, status=500)

        with pytest.raises(DownloadError):
            download_file(URL, tmp_path / "file.deb")

        assert len(responses.calls) == 1

    @responses.activate
    def test_write_error_removes_partial_file(self, tmp_path):
        """Test a local write failure is reported as a download failure."""
        content = b"x" * 20000
        responses.add(
            responses.GET, URL, body=content, headers={"content-length": str(len(content))}
        )
        dest = tmp_path / "file.deb"

        def disk_full(progress):
            raise OSError("No space left on device")

        with pytest.raises(DownloadError, match="No space left on device"):
            download_file(URL, dest, progress_callback=disk_full)

        assert not dest.exists()

    def test_empty_url_raises_valueerror(self, tmp_path):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "file.deb")

    def test_empty_destination_raises_valueerror(self):
        with pytest.raises(ValueError, match="Destination path cannot be empty"):
            download_file(URL, None)
