"""
Registry client for the plugin updater.

This module talks to a Spiget-style resource registry over HTTP:

- GET {base_url}/resources/{id}/versions/latest -> {"name": "<version>", ...}
- GET {base_url}/resources/{id}/download        -> raw artifact bytes

All requests are synchronous and bounded by the configured connect and read
timeouts. There is no retry; a failure surfaces as an UpdaterError.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import httpx

from plugin_updater.config import RegistryConfig
from plugin_updater.errors import (
    FileOperationError,
    InvalidResponseError,
    RegistryUnavailableError,
)
from plugin_updater.logging import get_logger

logger = get_logger(__name__)

# Chunk size for streaming downloads
DOWNLOAD_CHUNK_SIZE = 64 * 1024

PARTIAL_SUFFIX = ".part"


class RegistryClient:
    """
    HTTP client for one registry resource.

    Attributes:
        resource_id: Registry key of the artifact.
        config: Registry settings (base URL, timeouts, User-Agent suffix).

    Example:
        >>> client = RegistryClient(12345, user_agent="MyPlugin-Updater")
        >>> client.fetch_latest_version()
        '1.4.2'
    """

    def __init__(
        self,
        resource_id: int | str,
        user_agent: str,
        config: RegistryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the registry client.

        Args:
            resource_id: Registry key of the artifact.
            user_agent: Value of the User-Agent header sent with every request.
            config: Registry settings. Defaults to RegistryConfig().
            transport: Optional httpx transport, used to fake the registry
                in tests.
        """
        self.resource_id = resource_id
        self.user_agent = user_agent
        self.config = config or RegistryConfig()
        self._transport = transport

    @property
    def latest_version_url(self) -> str:
        """Return the URL of the latest-version endpoint."""
        return f"{self.config.base_url}/resources/{self.resource_id}/versions/latest"

    @property
    def download_url(self) -> str:
        """Return the URL of the download endpoint."""
        return f"{self.config.base_url}/resources/{self.resource_id}/download"

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.config.read_timeout,
            connect=self.config.connect_timeout,
            read=self.config.read_timeout,
        )

    def _client(self) -> httpx.Client:
        return httpx.Client(
            headers={"User-Agent": self.user_agent},
            timeout=self._timeout(),
            follow_redirects=True,
            transport=self._transport,
        )

    def fetch_latest_version(self) -> str:
        """
        Query the registry for the latest published version.

        Returns:
            The trimmed value of the response's "name" field.

        Raises:
            RegistryUnavailableError: On transport errors or a non-200 status.
            InvalidResponseError: If the body is not a JSON object with a
                usable "name" field.
        """
        url = self.latest_version_url
        logger.debug("Checking registry for latest version", extra={"url": url})

        try:
            with self._client() as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise RegistryUnavailableError(
                f"Request to {url} failed: {e}",
                details={"url": url, "error": str(e)},
            ) from e

        if response.status_code != 200:
            raise RegistryUnavailableError(
                f"HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            data: Any = response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Registry response is not valid JSON: {e}",
                details={"url": url},
            ) from e

        if not isinstance(data, dict):
            raise InvalidResponseError(
                "Registry response is not a JSON object",
                details={"url": url, "type": type(data).__name__},
            )

        if "name" not in data:
            raise InvalidResponseError(
                "Registry response missing 'name' field",
                details={"url": url},
            )

        name = data["name"]
        if isinstance(name, bool) or not isinstance(name, str | int | float):
            raise InvalidResponseError(
                "Registry response 'name' field is not a string",
                details={"url": url, "name": name},
            )

        return str(name).strip()

    def download_to(self, destination: Path) -> int:
        """
        Stream the artifact into destination.

        The body is written to a ".part" sibling first and renamed into place
        only after the transfer completed, so destination either does not
        exist or holds the complete artifact.

        Args:
            destination: Final path of the downloaded artifact.

        Returns:
            Number of bytes written.

        Raises:
            RegistryUnavailableError: On transport errors or a non-200 status.
            FileOperationError: If the file cannot be written or renamed.
        """
        url = self.download_url
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        written = 0

        try:
            with self._client() as client, client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise RegistryUnavailableError(
                        f"HTTP {response.status_code}",
                        details={"url": url, "status_code": response.status_code},
                    )
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
            os.replace(partial, destination)
        except httpx.HTTPError as e:
            _discard(partial)
            raise RegistryUnavailableError(
                f"Request to {url} failed: {e}",
                details={"url": url, "error": str(e)},
            ) from e
        except OSError as e:
            _discard(partial)
            raise FileOperationError(
                f"Cannot write {destination}: {e}",
                details={"path": str(destination), "error": str(e)},
            ) from e
        except RegistryUnavailableError:
            _discard(partial)
            raise

        logger.debug(
            "Download complete",
            extra={"url": url, "path": str(destination), "bytes": written},
        )
        return written


def _discard(path: Path) -> None:
    """Remove a partial download, ignoring a file that is already gone."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to remove partial download %s: %s", path, e)
