"""
HTTPS download helper.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import tempfile
from typing import Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .constants import APP_USER_AGENT, DOWNLOAD_CHUNK_SIZE, DOWNLOAD_TIMEOUT, MAX_DOWNLOAD_REDIRECTS
from .exceptions import PathResolutionError, PathTraversalError
from .models import DownloadResult, ExecutionResult, ShellSession
from .paths import PathResolutionMode, resolve_for_mutation
from .utils.logger import get_logger, log_security_event
from .utils.validators import validate_download_url

logger = get_logger(__name__)

HTTPS_ONLY = "Only HTTPS URLs are allowed for security"
INVALID_DESTINATION = "Invalid destination path"


class Downloader:
    """Fetches a file over HTTPS into the session's filesystem."""

    def __init__(self,
                 timeout: int = DOWNLOAD_TIMEOUT,
                 mode: PathResolutionMode = PathResolutionMode.LENIENT,
                 session: Optional[requests.Session] = None) -> None:
        """
        Initialize the downloader.

        Args:
            timeout: Connect and read timeout in seconds
            mode: Path resolution mode for the destination
            session: HTTP session to use
        """
        self.timeout = timeout
        self.mode = mode
        self.http = session or self._create_http_session()

    @staticmethod
    def _create_http_session() -> requests.Session:
        http = requests.Session()
        http.headers.update({
            "User-Agent": APP_USER_AGENT,
            "Connection": "close",
        })
        http.verify = True

        # No automatic retries
        adapter = HTTPAdapter(max_retries=0)
        http.mount("https://", adapter)
        return http

    def _open(self, url: str) -> Optional[requests.Response]:
        """
        Issue the GET and follow redirects by hand.

        Every hop must pass the same HTTPS check as the first URL.

        Returns:
            The final response, or None if a redirect left HTTPS
        """
        for _ in range(MAX_DOWNLOAD_REDIRECTS + 1):
            response = self.http.get(
                url, stream=True, timeout=(self.timeout, self.timeout), allow_redirects=False
            )
            if not response.is_redirect:
                return response

            location = urljoin(url, response.headers.get("location", ""))
            response.close()
            if not validate_download_url(location):
                log_security_event(
                    "INSECURE_DOWNLOAD_REDIRECT",
                    {"url": url, "location": location},
                    severity="warning"
                )
                return None
            logger.debug(f"Following redirect from {url} to {location}")
            url = location

        raise requests.TooManyRedirects(f"Exceeded {MAX_DOWNLOAD_REDIRECTS} redirects")

    def download(self, shell_session: ShellSession, url: str, destination: str) -> DownloadResult:
        """
        Download a URL to a destination path.

        The body is streamed to a temporary file beside the destination and
        renamed into place only once it is complete.

        Args:
            shell_session: Session the destination is resolved against
            url: HTTPS URL to fetch
            destination: Destination path; must not contain '..'

        Returns:
            DownloadResult; failures carry exit code 1
        """
        if not validate_download_url(url):
            log_security_event("INSECURE_DOWNLOAD_URL", {"url": url}, severity="warning")
            return DownloadResult(ExecutionResult.failure(HTTPS_ONLY))

        try:
            resolved = resolve_for_mutation(shell_session, destination, self.mode)
        except (PathTraversalError, PathResolutionError):
            return DownloadResult(ExecutionResult.failure(INVALID_DESTINATION))

        total_bytes = 0
        temp_path = None
        try:
            parent = os.path.dirname(resolved)
            os.makedirs(parent, exist_ok=True)

            response = self._open(url)
            if response is None:
                return DownloadResult(ExecutionResult.failure(HTTPS_ONLY))

            with response:
                response.raise_for_status()
                temp_fd, temp_path = tempfile.mkstemp(dir=parent, prefix=".shellgate_", suffix=".part")
                with os.fdopen(temp_fd, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            total_bytes += len(chunk)

            os.replace(temp_path, resolved)

        except (requests.RequestException, OSError, ValueError) as e:
            logger.error(f"Download of {url} failed: {e}")
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            return DownloadResult(ExecutionResult.failure(f"Download failed: {e}"))

        logger.info(f"Downloaded {total_bytes} bytes to {resolved}")
        return DownloadResult(
            result=ExecutionResult(stdout=f"Downloaded: {url} to {resolved} ({total_bytes} bytes)"),
            path=resolved,
            size=total_bytes
        )
