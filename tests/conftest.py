"""
Pytest configuration and shared fixtures for the plugin updater tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from plugin_updater.host import PluginHost

REGISTRY = "https://api.spiget.org/v2"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )


class RecordingHost(PluginHost):
    """PluginHost fake that records log messages."""

    def __init__(
        self,
        root: Path,
        name: str = "plugin",
        version: str = "1.0.0",
        artifact: Path | None = None,
    ) -> None:
        self._root = root
        self._name = name
        self._version = version
        self._artifact = artifact
        self.messages: list[tuple[int, str]] = []

    def name(self) -> str:
        return self._name

    def data_directory(self) -> Path:
        return self._root / "data"

    def current_version(self) -> str:
        return self._version

    def install_directory(self) -> Path:
        return self._root / "plugins"

    def artifact_path(self) -> Path | None:
        return self._artifact

    def log(self, level: int, message: str) -> None:
        self.messages.append((level, message))

    def warnings(self) -> list[str]:
        return [m for level, m in self.messages if level == logging.WARNING]

    def infos(self) -> list[str]:
        return [m for level, m in self.messages if level == logging.INFO]


class TruncatedStream(httpx.SyncByteStream):
    """Response body that drops the connection after the first chunk."""

    def __init__(self, first_chunk: bytes = b"PK\x03\x04") -> None:
        self.first_chunk = first_chunk

    def __iter__(self) -> Iterator[bytes]:
        yield self.first_chunk
        raise httpx.ReadError("connection reset")


class FakeRegistry:
    """
    In-memory registry served through httpx.MockTransport.

    Attributes:
        latest: Response for the latest-version endpoint, as a
            (status, json-or-bytes) pair.
        artifact: Response for the download endpoint.
        requests: Every request received, in order.
    """

    def __init__(self) -> None:
        self.latest: tuple[int, object] = (200, {"id": 1, "name": "1.0.0"})
        self.artifact: tuple[int, bytes | httpx.SyncByteStream] = (
            200,
            b"PK\x03\x04artifact-bytes",
        )
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if request.url.path.endswith("/versions/latest"):
            status, body = self.latest
            if isinstance(body, bytes):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        if request.url.path.endswith("/download"):
            status, content = self.artifact
            if isinstance(content, httpx.SyncByteStream):
                return httpx.Response(status, stream=content)
            return httpx.Response(status, content=content)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def registry() -> FakeRegistry:
    """A fake registry answering 1.0.0 with a small artifact."""
    return FakeRegistry()


@pytest.fixture
def host_factory(tmp_path: Path) -> Callable[..., RecordingHost]:
    """Build RecordingHosts rooted in the test's temporary directory."""

    def factory(**kwargs: object) -> RecordingHost:
        return RecordingHost(tmp_path, **kwargs)  # type: ignore[arg-type]

    return factory
