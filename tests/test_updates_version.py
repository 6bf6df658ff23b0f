"""
Tests for the version comparison module.

Tests cover:
- Version normalization
- Component splitting and parsing
- compare_versions ordering and errors
- is_newer fail-closed behavior
"""

from __future__ import annotations

from unittest import mock

import pytest

from plugin_updater.errors import VersionFormatError
from plugin_updater.updates import version as version_module
from plugin_updater.updates.version import (
    compare_versions,
    is_newer,
    normalize_version,
    parse_version_components,
    split_version,
)

# =============================================================================
# Normalization Tests
# =============================================================================


class TestNormalizeVersion:
    """Tests for normalize_version function."""

    def test_plain_version_unchanged(self) -> None:
        """Test that a plain dotted version is left alone."""
        assert normalize_version("1.4.2") == "1.4.2"

    def test_strips_letters(self) -> None:
        """Test that letters are removed but their periods are kept."""
        assert normalize_version("v1.a.2") == "1..2"

    def test_strips_suffixes_and_whitespace(self) -> None:
        """Test that qualifiers and whitespace are removed."""
        assert normalize_version("  2.0-SNAPSHOT ") == "2.0"
        assert normalize_version("Release 3.1 (beta)") == "3.1"

    def test_empty_result(self) -> None:
        """Test that a version with no digits normalizes to empty."""
        assert normalize_version("latest") == ""


class TestSplitVersion:
    """Tests for split_version function."""

    def test_split_components(self) -> None:
        """Test splitting into components."""
        assert split_version("1.4.2") == ["1", "4", "2"]

    def test_trailing_period_dropped(self) -> None:
        """Test that trailing empty components are dropped."""
        assert split_version("1.2.") == ["1", "2"]

    def test_empty_version_is_single_empty_component(self) -> None:
        """Test that an empty version stays a single empty component."""
        assert split_version("") == [""]

    def test_inner_empty_component_kept(self) -> None:
        """Test that an empty component in the middle is preserved."""
        assert split_version("1..2") == ["1", "", "2"]


class TestParseVersionComponents:
    """Tests for parse_version_components function."""

    def test_parse_components(self) -> None:
        """Test parsing components as integers."""
        assert parse_version_components("10.0.3") == [10, 0, 3]

    def test_parse_leading_zeros(self) -> None:
        """Test that leading zeros parse as plain integers."""
        assert parse_version_components("1.02") == [1, 2]

    def test_empty_raises(self) -> None:
        """Test that an empty version fails to parse."""
        with pytest.raises(VersionFormatError) as exc_info:
            parse_version_components("")
        assert exc_info.value.error_code == "invalid_argument"
        assert exc_info.value.details["index"] == 0

    def test_empty_inner_component_raises(self) -> None:
        """Test that an empty inner component fails to parse."""
        with pytest.raises(VersionFormatError):
            parse_version_components("1..2")


# =============================================================================
# Comparison Tests
# =============================================================================


class TestCompareVersions:
    """Tests for compare_versions function."""

    @pytest.mark.parametrize(
        ("latest", "current", "expected"),
        [
            ("1.4.2", "1.4.1", 1),
            ("1.4.1", "1.4.2", -1),
            ("1.4.2", "1.4.2", 0),
            ("2.0.0", "1.9.9", 1),
            ("1.10", "1.9", 1),
            ("1.4", "1.4.0", 0),
            ("1.4.0.1", "1.4", 1),
            ("1", "1.0.1", -1),
        ],
    )
    def test_ordering(self, latest: str, current: str, expected: int) -> None:
        """Test component-wise numeric ordering."""
        assert compare_versions(latest, current) == expected

    def test_error_names_both_inputs(self) -> None:
        """Test that the error mentions both raw versions."""
        with pytest.raises(VersionFormatError) as exc_info:
            compare_versions("1.0", "snapshot")

        error = exc_info.value
        assert "latest=1.0" in error.message
        assert "current=snapshot" in error.message
        assert error.details["latest"] == "1.0"
        assert error.details["current"] == "snapshot"


class TestIsNewer:
    """Tests for is_newer function."""

    def test_newer_patch(self) -> None:
        """Test a newer patch version."""
        assert is_newer("1.4.2", "1.4.1") is True

    def test_older_patch(self) -> None:
        """Test an older patch version."""
        assert is_newer("1.4.1", "1.4.2") is False

    def test_missing_trailing_component_is_zero(self) -> None:
        """Test that 1.4 equals 1.4.0."""
        assert is_newer("1.4", "1.4.0") is False
        assert is_newer("1.4.0", "1.4") is False

    @pytest.mark.parametrize("version", ["1", "1.0.0", "3.2.1.7", "v2.0-RC"])
    def test_equal_is_not_newer(self, version: str) -> None:
        """Test that a version is never newer than itself."""
        assert is_newer(version, version) is False

    def test_first_difference_decides(self) -> None:
        """Test that later components are ignored after a difference."""
        assert is_newer("2.0.0", "1.99.99") is True
        assert is_newer("1.99.99", "2.0.0") is False

    def test_letter_component_leaves_empty_component(self) -> None:
        """Test that v1.a.2 normalizes to 1..2, fails to parse and warns."""
        with mock.patch.object(version_module.logger, "warning") as warning:
            assert is_newer("v1.a.2", "1.1") is False

        warning.assert_called_once()
        assert "latest=v1.a.2, current=1.1" in warning.call_args.args[0]

    def test_empty_returns_false_and_warns(self) -> None:
        """Test that an unparseable version is not newer and is logged."""
        with mock.patch.object(version_module.logger, "warning") as warning:
            assert is_newer("", "1.0") is False
            assert is_newer("9.9", "unknown") is False

        assert warning.call_count == 2
        assert "latest=, current=1.0" in warning.call_args_list[0].args[0]

    def test_never_raises_on_malformed_input(self) -> None:
        """Test that malformed input returns False instead of raising."""
        for latest, current in [("..", "1"), ("1..2", "1"), ("abc", "def")]:
            assert is_newer(latest, current) is False
