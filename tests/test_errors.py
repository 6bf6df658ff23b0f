"""
Tests for the errors module.

This test module validates:
- UpdaterError base class functionality
- Error subclasses and their error codes
- Error serialization (to_dict)
"""

from __future__ import annotations

import pytest

from plugin_updater.errors import (
    FileOperationError,
    InternalError,
    InvalidResponseError,
    RegistryUnavailableError,
    UpdaterError,
    VersionFormatError,
)

# =============================================================================
# Tests for UpdaterError Base Class
# =============================================================================


class TestUpdaterError:
    """Tests for UpdaterError base class."""

    def test_init_with_all_args(self) -> None:
        """Test UpdaterError initialization with all arguments."""
        error = UpdaterError(
            error_code="test_error",
            message="Test error message",
            details={"key": "value"},
        )

        assert error.error_code == "test_error"
        assert error.message == "Test error message"
        assert error.details == {"key": "value"}

    def test_init_with_minimal_args(self) -> None:
        """Test UpdaterError initialization with minimal arguments."""
        error = UpdaterError(error_code="test_error", message="Test message")
        assert error.details == {}

    def test_str_representation(self) -> None:
        """Test UpdaterError string representation."""
        error = UpdaterError(error_code="test_error", message="Test error message")
        assert str(error) == "Test error message"

    def test_repr_representation(self) -> None:
        """Test UpdaterError repr representation."""
        error = UpdaterError(error_code="x", message="msg", details={"a": 1})
        assert repr(error) == (
            "UpdaterError(error_code='x', message='msg', details={'a': 1})"
        )

    def test_to_dict(self) -> None:
        """Test UpdaterError serialization to dictionary."""
        error = UpdaterError(
            error_code="unavailable",
            message="HTTP 503",
            details={"status_code": 503},
        )

        assert error.to_dict() == {
            "error_code": "unavailable",
            "message": "HTTP 503",
            "details": {"status_code": 503},
        }

    def test_can_be_raised_and_caught(self) -> None:
        """Test that UpdaterError can be raised and caught."""
        with pytest.raises(UpdaterError) as exc_info:
            raise UpdaterError(error_code="test", message="Test")
        assert exc_info.value.error_code == "test"


# =============================================================================
# Tests for Error Subclasses
# =============================================================================


class TestErrorSubclasses:
    """Tests for UpdaterError subclasses."""

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (RegistryUnavailableError, "unavailable"),
            (InvalidResponseError, "invalid_response"),
            (VersionFormatError, "invalid_argument"),
            (FileOperationError, "failed_precondition"),
            (InternalError, "internal"),
        ],
    )
    def test_error_codes(self, error_class: type[UpdaterError], code: str) -> None:
        """Test that each subclass carries its error code."""
        error = error_class("something failed", details={"path": "/tmp/x"})

        assert isinstance(error, UpdaterError)
        assert error.error_code == code
        assert error.message == "something failed"
        assert error.details == {"path": "/tmp/x"}

    def test_catch_subclass_as_base(self) -> None:
        """Test that subclasses can be caught as UpdaterError."""
        with pytest.raises(UpdaterError):
            raise FileOperationError("Permission denied")
