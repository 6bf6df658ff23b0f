"""
Host collaborator interface for the plugin updater.

The updater never talks to a concrete plugin runtime directly. Everything it
needs from the hosting application (artifact name, data directory, running
version, installation directory, log sink) comes through a PluginHost.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from plugin_updater.logging import get_logger

DEFAULT_INSTALL_DIR = Path("plugins")


class PluginHost(ABC):
    """
    Abstract base class for the application hosting the updated artifact.

    Concrete hosts must provide the artifact name, the data directory, the
    running version and a log sink. The installation directory and the path
    of the currently loaded artifact have defaults that hosts may override.
    """

    @abstractmethod
    def name(self) -> str:
        """Return the artifact name (used for file names and User-Agent)."""

    @abstractmethod
    def data_directory(self) -> Path:
        """Return the host data directory; staging lives below it."""

    @abstractmethod
    def current_version(self) -> str:
        """Return the version of the running artifact."""

    @abstractmethod
    def log(self, level: int, message: str) -> None:
        """
        Emit a log message through the host's log sink.

        Args:
            level: A standard logging level (e.g., logging.WARNING).
            message: Human-readable message.
        """

    def install_directory(self) -> Path:
        """Return the directory holding installed artifacts."""
        return DEFAULT_INSTALL_DIR

    def artifact_path(self) -> Path | None:
        """Return the file the running artifact was loaded from, if known."""
        return None


class StandaloneHost(PluginHost):
    """
    PluginHost for scripts and the command line.

    All values are supplied up front; log messages go to the
    plugin_updater.host logger.
    """

    def __init__(
        self,
        name: str,
        current_version: str,
        data_dir: Path | str,
        install_dir: Path | str = DEFAULT_INSTALL_DIR,
        artifact_path: Path | str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._name = name
        self._current_version = current_version
        self._data_dir = Path(data_dir)
        self._install_dir = Path(install_dir)
        self._artifact_path = Path(artifact_path) if artifact_path else None
        self._logger = logger or get_logger("plugin_updater.host")

    def name(self) -> str:
        return self._name

    def data_directory(self) -> Path:
        return self._data_dir

    def current_version(self) -> str:
        return self._current_version

    def install_directory(self) -> Path:
        return self._install_dir

    def artifact_path(self) -> Path | None:
        return self._artifact_path

    def log(self, level: int, message: str) -> None:
        self._logger.log(level, message, extra={"artifact": self._name})
