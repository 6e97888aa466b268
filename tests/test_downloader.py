"""
Tests for the HTTPS download helper.
"""

import os
from unittest.mock import MagicMock, Mock

import pytest
import requests

from shellgate.downloader import HTTPS_ONLY, INVALID_DESTINATION, Downloader


def _response(chunks, status_error=None):
    response = MagicMock()
    response.is_redirect = False
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.iter_content.return_value = iter(chunks)
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


def _redirect(location):
    response = MagicMock()
    response.is_redirect = True
    response.headers = {"location": location}
    return response


@pytest.fixture
def http():
    """Stand-in for requests.Session."""
    return Mock(spec=requests.Session)


class TestDownloader:
    """Test Downloader.download."""

    def test_successful_download(self, http, session):
        """Chunks are streamed to the resolved destination."""
        http.get.return_value = _response([b"abc", b"", b"def"])
        downloader = Downloader(session=http)

        result = downloader.download(session, "https://example.com/f.bin", "downloads/f.bin")

        path = os.path.realpath(os.path.join(session.home, "downloads", "f.bin"))
        assert result.result.exit_code == 0
        assert result.path == path
        assert result.size == 6
        assert result.result.stdout == f"Downloaded: https://example.com/f.bin to {path} (6 bytes)"
        with open(path, "rb") as f:
            assert f.read() == b"abcdef"

    def test_timeouts_and_streaming(self, http, session):
        """The GET is streamed with a 30 second connect and read timeout."""
        http.get.return_value = _response([b"x"])

        Downloader(session=http).download(session, "https://example.com/x", "x")

        http.get.assert_called_once_with(
            "https://example.com/x", stream=True, timeout=(30, 30), allow_redirects=False
        )

    def test_custom_timeout(self, http, session):
        """The timeout is configurable."""
        http.get.return_value = _response([b"x"])

        Downloader(timeout=5, session=http).download(session, "https://example.com/x", "x")

        assert http.get.call_args[1]["timeout"] == (5, 5)

    @pytest.mark.parametrize("url", ["http://example.com/x", "ftp://example.com/x", "file:///etc/passwd"])
    def test_non_https_refused(self, http, session, url):
        """Only HTTPS is fetched."""
        result = Downloader(session=http).download(session, url, "x")

        assert result.result.exit_code == 1
        assert result.result.stderr == HTTPS_ONLY
        http.get.assert_not_called()

    def test_traversal_destination_refused(self, http, session):
        """Destinations with '..' are refused before any request."""
        result = Downloader(session=http).download(session, "https://example.com/x", "../../etc/cron.d/x")

        assert result.result.stderr == INVALID_DESTINATION
        http.get.assert_not_called()

    def test_http_error(self, http, session):
        """HTTP errors are reported, never raised."""
        http.get.return_value = _response([], status_error=requests.HTTPError("404 Client Error"))

        result = Downloader(session=http).download(session, "https://example.com/missing", "m")

        assert result.result.exit_code == 1
        assert result.result.stderr == "Download failed: 404 Client Error"
        assert result.path is None

    def test_connection_error(self, http, session):
        """Network failures are reported with the download prefix."""
        http.get.side_effect = requests.ConnectionError("unreachable")

        result = Downloader(session=http).download(session, "https://example.com/x", "x")

        assert result.result.stderr.startswith("Download failed: ")

    def test_timeout_error(self, http, session):
        """Timeouts are not retried."""
        http.get.side_effect = requests.Timeout("read timed out")

        result = Downloader(session=http).download(session, "https://example.com/x", "x")

        assert result.result.exit_code == 1
        assert http.get.call_count == 1

    def test_default_http_session_has_no_retries(self):
        """The built-in session mounts an adapter with retries disabled."""
        downloader = Downloader()
        adapter = downloader.http.get_adapter("https://example.com")
        assert adapter.max_retries.total == 0
        assert downloader.http.headers["User-Agent"].startswith("ShellGateway/")

    def test_to_dict(self, http, session):
        """The UI shape includes path and size on success."""
        http.get.return_value = _response([b"12"])

        data = Downloader(session=http).download(session, "https://example.com/x", "x").to_dict()

        assert data["exitCode"] == 0
        assert data["size"] == 2
        assert data["path"].endswith("/x")


class TestRedirects:
    """Test that redirects are followed only while they stay on HTTPS."""

    def test_redirect_to_http_refused(self, http, session):
        """A hop to plain HTTP is refused and never fetched."""
        http.get.side_effect = [_redirect("http://evil.example/x"), _response([b"payload"])]

        result = Downloader(session=http).download(session, "https://example.com/x", "x")

        assert result.result.exit_code == 1
        assert result.result.stderr == HTTPS_ONLY
        assert http.get.call_count == 1
        assert not os.path.exists(os.path.join(session.home, "x"))

    def test_https_redirect_followed(self, http, session):
        """Relative and absolute HTTPS hops are followed."""
        http.get.side_effect = [
            _redirect("/mirror/x"),
            _redirect("https://cdn.example.com/x"),
            _response([b"data"]),
        ]

        result = Downloader(session=http).download(session, "https://example.com/x", "x")

        assert result.result.exit_code == 0
        assert [c[0][0] for c in http.get.call_args_list] == [
            "https://example.com/x",
            "https://example.com/mirror/x",
            "https://cdn.example.com/x",
        ]

    def test_too_many_redirects(self, http, session):
        """Redirect chains beyond the limit fail."""
        http.get.side_effect = [_redirect(f"https://example.com/{n}") for n in range(10)]

        result = Downloader(session=http).download(session, "https://example.com/x", "x")

        assert result.result.exit_code == 1
        assert result.result.stderr.startswith("Download failed: ")
        assert http.get.call_count == 4


class TestPartialDownloads:
    """Test that failed downloads leave nothing behind."""

    def test_mid_stream_failure_removes_file(self, http, session):
        """A connection drop after some chunks leaves no destination or temp file."""
        def chunks():
            yield b"abc"
            raise requests.exceptions.ChunkedEncodingError("connection broken")

        response = _response([])
        response.iter_content.return_value = chunks()
        http.get.return_value = response
        target_dir = os.path.join(session.home, "downloads")

        result = Downloader(session=http).download(session, "https://example.com/x", "downloads/f.bin")

        assert result.result.exit_code == 1
        assert result.result.stderr == "Download failed: connection broken"
        assert os.listdir(target_dir) == []

    def test_failure_keeps_existing_file(self, http, session):
        """An earlier file at the destination survives a failed download."""
        path = os.path.join(session.home, "f.bin")
        with open(path, "wb") as f:
            f.write(b"old")
        http.get.return_value = _response([], status_error=requests.HTTPError("500 Server Error"))

        Downloader(session=http).download(session, "https://example.com/x", "f.bin")

        with open(path, "rb") as f:
            assert f.read() == b"old"
