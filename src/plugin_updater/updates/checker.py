"""
Update checker for the plugin updater.

This module implements the update lifecycle of a hosted plugin artifact:

- check:    query the registry for the latest published version
- compare:  decide whether it is newer than the running version
- download: stream the newer artifact into the staging directory
- finalize: at shutdown, replace the installed artifact with the staged one

Each internal operation returns an OperationResult instead of raising. The
public UpdaterService methods are thin adapters that log those results
through the host and never raise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, Field

from plugin_updater.config import RegistryConfig, UpdaterConfig
from plugin_updater.errors import InternalError, UpdaterError, VersionFormatError
from plugin_updater.logging import get_logger
from plugin_updater.updates.operations import (
    artifact_file_name,
    ensure_directory,
    find_installed_artifacts,
    move_replace,
    remove_file,
)
from plugin_updater.updates.registry import RegistryClient
from plugin_updater.updates.version import compare_versions

if TYPE_CHECKING:
    from plugin_updater.config import AppConfig
    from plugin_updater.host import PluginHost

logger = get_logger(__name__)

_UPDATER_DEFAULTS = UpdaterConfig()


class UpdaterService(ABC):
    """
    Interface the host uses to drive updates.

    The host calls check_for_updates() (e.g., on startup or from a scheduled
    task) and finalize_on_shutdown() late in its shutdown sequence. None of
    the methods raise.
    """

    @abstractmethod
    def check_for_updates(self, auto_update: bool) -> None:
        """Check the registry and, if auto_update is set, download a newer version."""

    @abstractmethod
    def is_update_available(self) -> bool:
        """Return True if the last successful check found a newer version."""

    @abstractmethod
    def get_latest_version(self) -> str | None:
        """Return the latest registry version, or None if never checked."""

    @abstractmethod
    def finalize_on_shutdown(self) -> None:
        """Move a staged update into the installation directory."""


class UpdateState(BaseModel):
    """
    Mutable update state owned by one UpdateChecker.

    Fields are only set after the operation they describe has fully
    succeeded.
    """

    latest_version: str | None = Field(
        default=None,
        description="Latest version reported by the registry",
    )
    update_available: bool = Field(
        default=False,
        description="Whether latest_version is newer than the running version",
    )
    staged_file: Path | None = Field(
        default=None,
        description="Fully downloaded artifact waiting to be installed",
    )


class OperationResult:
    """Result of one internal update operation."""

    def __init__(
        self,
        operation: str,
        ok: bool,
        message: str,
        *,
        level: int = logging.INFO,
        error: UpdaterError | None = None,
        notes: list[tuple[int, str]] | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize the operation result.

        Args:
            operation: Operation name ("check", "download", "finalize").
            ok: Whether the operation succeeded.
            message: Summary message for the log.
            level: Logging level of the summary message.
            error: The error that made the operation fail, if any.
            notes: (level, message) pairs logged before the summary.
            hint: Operator-facing instruction logged after the summary.
            details: Optional additional details.
        """
        self.operation = operation
        self.ok = ok
        self.message = message
        self.level = level
        self.error = error
        self.notes = notes or []
        self.hint = hint
        self.details = details or {}

    def __repr__(self) -> str:
        return (
            f"OperationResult(operation={self.operation!r}, ok={self.ok!r}, "
            f"message={self.message!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operation": self.operation,
            "ok": self.ok,
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
            "notes": [message for _, message in self.notes],
            "hint": self.hint,
            "details": self.details,
        }


def _as_updater_error(error: Exception) -> UpdaterError:
    if isinstance(error, UpdaterError):
        return error
    return InternalError(
        str(error) or error.__class__.__name__,
        details={"type": error.__class__.__name__},
    )


def _failure(
    operation: str,
    prefix: str,
    error: Exception,
    notes: list[tuple[int, str]] | None = None,
    hint: str | None = None,
) -> OperationResult:
    updater_error = _as_updater_error(error)
    return OperationResult(
        operation,
        ok=False,
        message=f"{prefix}: {updater_error.message}",
        level=logging.WARNING,
        error=updater_error,
        notes=notes,
        hint=hint,
    )


class UpdateChecker(UpdaterService):
    """
    Checks a registry resource for updates and stages them for install.

    Attributes:
        host: The hosting application.
        resource_id: Registry key of the artifact.
        state: Current UpdateState.

    Example:
        >>> checker = UpdateChecker(host, resource_id=12345)
        >>> checker.check_for_updates(auto_update=True)
        >>> checker.is_update_available()
        True
        >>> checker.finalize_on_shutdown()
    """

    def __init__(
        self,
        host: PluginHost,
        resource_id: int | str,
        *,
        registry_config: RegistryConfig | None = None,
        artifact_extension: str = _UPDATER_DEFAULTS.artifact_extension,
        staging_dir_name: str = _UPDATER_DEFAULTS.staging_dir_name,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the update checker.

        Args:
            host: The hosting application.
            resource_id: Registry key of the artifact.
            registry_config: Registry settings. Defaults to RegistryConfig().
            artifact_extension: File extension of artifact files.
            staging_dir_name: Staging directory name below the data directory.
            transport: Optional httpx transport for the registry client.
        """
        self.host = host
        self.resource_id = resource_id
        self.artifact_extension = artifact_extension
        self.staging_dir_name = staging_dir_name
        self.state = UpdateState()

        registry_config = registry_config or RegistryConfig()
        self.client = RegistryClient(
            resource_id,
            user_agent=f"{host.name()}{registry_config.user_agent_suffix}",
            config=registry_config,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        host: PluginHost,
        config: AppConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> UpdateChecker:
        """
        Create an UpdateChecker from configuration.

        Args:
            host: The hosting application.
            config: AppConfig with registry and updater settings.
            transport: Optional httpx transport for the registry client.

        Raises:
            ValueError: If no resource id is configured.
        """
        if config.updater.resource_id in (None, ""):
            raise ValueError("updater.resource_id is not configured")

        return cls(
            host,
            config.updater.resource_id,
            registry_config=config.registry,
            artifact_extension=config.updater.artifact_extension,
            staging_dir_name=config.updater.staging_dir_name,
            transport=transport,
        )

    @property
    def staging_directory(self) -> Path:
        """Return the directory downloads are staged in."""
        return self.host.data_directory() / self.staging_dir_name

    # =========================================================================
    # Public operations
    # =========================================================================

    def check_for_updates(self, auto_update: bool) -> None:
        """
        Check the registry for a newer version.

        If a newer version exists and auto_update is True, the artifact is
        downloaded into the staging directory. Failures are logged as
        warnings and leave the state unchanged.
        """
        try:
            result = self.check()
            self._report(result)
            if result.ok and self.state.update_available and auto_update:
                self._report(self.download())
        except Exception as e:
            logger.warning("Failed to check for updates: %s", e, exc_info=True)

    def is_update_available(self) -> bool:
        return self.state.update_available

    def get_latest_version(self) -> str | None:
        return self.state.latest_version

    def finalize_on_shutdown(self) -> None:
        """
        Replace the installed artifact with the staged one.

        Does nothing if no update was staged. If the swap fails, a warning
        and manual recovery instructions are logged.
        """
        try:
            self._report(self.finalize())
        except Exception as e:
            logger.warning("Failed to apply update: %s", e, exc_info=True)

    def _report(self, result: OperationResult) -> None:
        for level, message in result.notes:
            self.host.log(level, message)
        self.host.log(result.level, result.message)
        if result.hint:
            self.host.log(logging.INFO, result.hint)

    # =========================================================================
    # Internal operations
    # =========================================================================

    def check(self) -> OperationResult:
        """
        Query the registry and compare against the running version.

        Returns:
            OperationResult; on failure the state is untouched.
        """
        try:
            latest = self.client.fetch_latest_version()
            current = self.host.current_version().strip()
        except Exception as e:
            return _failure("check", "Failed to check for updates", e)

        notes: list[tuple[int, str]] = []
        self.state.latest_version = latest
        try:
            newer = compare_versions(latest, current) > 0
        except VersionFormatError as e:
            notes.append((logging.WARNING, e.message))
            newer = False

        self.state.update_available = newer
        details = {"latest_version": latest, "current_version": current}

        if newer:
            return OperationResult(
                "check",
                ok=True,
                message=f"Update available: v{latest} (current: v{current})",
                notes=notes,
                details=details,
            )
        return OperationResult(
            "check",
            ok=True,
            message=f"No update available. Current: v{current}, registry: v{latest}",
            notes=notes,
            details=details,
        )

    def download(self) -> OperationResult:
        """
        Download the latest version into the staging directory.

        An already staged file for the same version is reused without a
        network request. staged_file is only set once the file is complete.

        Returns:
            OperationResult; on failure staged_file is None.
        """
        latest = self.state.latest_version
        if latest is None:
            return _failure(
                "download",
                "Failed to download update",
                InternalError("No latest version known; check for updates first"),
            )

        try:
            staging_dir = ensure_directory(self.staging_directory)
            destination = staging_dir / artifact_file_name(
                self.host.name(), latest, self.artifact_extension
            )

            if destination.exists():
                self.state.staged_file = destination
                return OperationResult(
                    "download",
                    ok=True,
                    message=f"Update file {destination} already exists.",
                    details={"path": str(destination), "skipped": True},
                )

            size = self.client.download_to(destination)
        except Exception as e:
            self.state.staged_file = None
            return _failure("download", "Failed to download update", e)

        self.state.staged_file = destination
        return OperationResult(
            "download",
            ok=True,
            message=f"Downloaded update to {destination}.",
            details={"path": str(destination), "bytes": size, "skipped": False},
        )

    def finalize(self) -> OperationResult:
        """
        Delete installed artifacts and move the staged file into place.

        Deletes are best-effort: a failed delete is noted and the remaining
        files are still processed. The target keeps the staged file's name,
        so a later check that saw an even newer version cannot mislabel it.

        Returns:
            OperationResult; failures carry manual recovery instructions.
        """
        staged = self.state.staged_file
        if staged is None or not staged.exists():
            return OperationResult(
                "finalize",
                ok=True,
                message="No staged update to apply.",
                level=logging.DEBUG,
                details={"skipped": True},
            )

        name = self.host.name()
        install_dir = self.host.install_directory()
        target = install_dir / staged.name
        notes: list[tuple[int, str]] = []

        try:
            for artifact in find_installed_artifacts(
                install_dir, name, self.artifact_extension
            ):
                self._remove_installed(artifact, "old", notes)

            current = self.host.artifact_path()
            if current is not None and current.is_file():
                self._remove_installed(current, "current", notes)

            move_replace(staged, target)
        except Exception as e:
            return _failure(
                "finalize",
                "Failed to apply update",
                e,
                notes=notes,
                hint=(
                    f"To apply update manually: 1) Stop server. "
                    f"2) Remove old {name} {self.artifact_extension} files. "
                    f"3) Move {staged} to {target}. 4) Restart server."
                ),
            )

        self.state.staged_file = None
        return OperationResult(
            "finalize",
            ok=True,
            message=f"Moved update to {target}. Restart server to apply.",
            notes=notes,
            details={"target": str(target)},
        )

    @staticmethod
    def _remove_installed(
        path: Path, kind: str, notes: list[tuple[int, str]]
    ) -> None:
        try:
            if remove_file(path):
                notes.append((logging.INFO, f"Deleted {kind} artifact: {path}"))
        except UpdaterError as e:
            notes.append(
                (logging.WARNING, f"Failed to delete {kind} artifact {path}: {e.message}")
            )
