"""
Error types for the plugin updater.

This module defines the UpdaterError base class and subclasses for the failure
categories of the update lifecycle: registry/transport failures, malformed
registry responses, unparseable versions and filesystem failures.

These errors are raised by the lower layers (registry client, filesystem
operations, version comparison) and caught by UpdateChecker, which converts
them into OperationResult values and logged warnings. They never cross the
public UpdaterService boundary.
"""

from __future__ import annotations

from typing import Any


class UpdaterError(Exception):
    """
    Base exception class for updater errors.

    Attributes:
        error_code: Internal error code string (e.g., "unavailable",
            "invalid_response", "invalid_argument", "failed_precondition",
            "internal").
        message: Human-readable error message.
        details: Optional structured details (e.g., URL, path, status code).

    Example:
        >>> raise UpdaterError(
        ...     error_code="unavailable",
        ...     message="Registry returned HTTP 503",
        ...     details={"status_code": 503},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize an UpdaterError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class RegistryUnavailableError(UpdaterError):
    """
    Error raised when the registry cannot be reached or answers with a
    non-200 status.

    Covers connect/read timeouts, connection errors and unexpected HTTP
    status codes.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a RegistryUnavailableError."""
        super().__init__(error_code="unavailable", message=message, details=details)


class InvalidResponseError(UpdaterError):
    """
    Error raised when a registry response body cannot be parsed or lacks a
    required field.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InvalidResponseError."""
        super().__init__(
            error_code="invalid_response", message=message, details=details
        )


class VersionFormatError(UpdaterError):
    """
    Error raised when a version string has a component that is not a
    non-negative integer after normalization.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a VersionFormatError."""
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class FileOperationError(UpdaterError):
    """
    Error raised when a filesystem operation fails.

    Used for directory creation, streaming writes, deletes and moves
    (permission denied, missing directory, file in use).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a FileOperationError."""
        super().__init__(
            error_code="failed_precondition", message=message, details=details
        )


class InternalError(UpdaterError):
    """
    Error raised for unexpected internal errors.

    UpdateChecker wraps any exception that is not an UpdaterError in this
    class so that results always carry a typed error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InternalError."""
        super().__init__(error_code="internal", message=message, details=details)
