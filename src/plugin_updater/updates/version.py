"""
Version comparison for the plugin updater.

Registry versions are free-form labels ("1.4.2", "v2.0-SNAPSHOT",
"Release 3.1"). Before comparison every character that is not a digit or a
period is removed, and the remaining dotted components are compared as
integers, with missing components treated as 0.
"""

from __future__ import annotations

import re

from plugin_updater.errors import VersionFormatError
from plugin_updater.logging import get_logger

logger = get_logger(__name__)

_NON_VERSION_CHARS = re.compile(r"[^0-9.]")


def normalize_version(version: str) -> str:
    """
    Strip everything except digits and periods.

    Example:
        >>> normalize_version("v2.0-SNAPSHOT")
        '2.0'
        >>> normalize_version("v1.a.2")
        '1..2'
    """
    return _NON_VERSION_CHARS.sub("", version).strip()


def split_version(version: str) -> list[str]:
    """
    Normalize a version and split it into its dotted components.

    Trailing empty components are dropped ("1.2." gives ["1", "2"]), but an
    empty version always yields a single empty component so that it fails
    to parse.
    """
    parts = normalize_version(version).split(".")
    while len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return parts


def parse_version_components(version: str) -> list[int]:
    """
    Parse a version into a list of non-negative integers.

    Args:
        version: Raw version string.

    Returns:
        Integer components in order.

    Raises:
        VersionFormatError: If any component is not a non-negative integer.
    """
    components = []
    for index, part in enumerate(split_version(version)):
        if not part.isdigit():
            raise VersionFormatError(
                f"Invalid version format: {version!r}",
                details={"version": version, "component": part, "index": index},
            )
        components.append(int(part))
    return components


def compare_versions(latest: str, current: str) -> int:
    """
    Compare two versions component by component.

    Args:
        latest: Candidate (registry) version.
        current: Installed version.

    Returns:
        1 if latest is newer, -1 if it is older, 0 if they are equal.

    Raises:
        VersionFormatError: If either version cannot be parsed. The error
            details name both raw inputs.
    """
    try:
        latest_parts = parse_version_components(latest)
        current_parts = parse_version_components(current)
    except VersionFormatError as e:
        raise VersionFormatError(
            f"Invalid version format: latest={latest}, current={current}",
            details={"latest": latest, "current": current, **e.details},
        ) from e

    length = max(len(latest_parts), len(current_parts))
    for index in range(length):
        latest_num = latest_parts[index] if index < len(latest_parts) else 0
        current_num = current_parts[index] if index < len(current_parts) else 0
        if latest_num > current_num:
            return 1
        if latest_num < current_num:
            return -1
    return 0


def is_newer(latest: str, current: str) -> bool:
    """
    Return True if latest is strictly newer than current.

    Never raises. Unparseable input is logged as a warning and reported as
    not newer.

    Example:
        >>> is_newer("1.4.2", "1.4.1")
        True
        >>> is_newer("1.4", "1.4.0")
        False
    """
    try:
        return compare_versions(latest, current) > 0
    except VersionFormatError as e:
        logger.warning(e.message, extra={"latest": latest, "current": current})
        return False
