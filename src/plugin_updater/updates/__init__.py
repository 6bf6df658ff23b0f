"""
Self-update mechanism for hosted plugin artifacts.

This package implements the update lifecycle:
- Version normalization and comparison
- Registry client for version lookup and artifact download
- Staging and installation filesystem operations
- UpdateChecker orchestrating check, download and finalize
"""

from plugin_updater.updates.checker import (
    OperationResult,
    UpdateChecker,
    UpdaterService,
    UpdateState,
)
from plugin_updater.updates.operations import (
    artifact_file_name,
    ensure_directory,
    find_installed_artifacts,
    move_replace,
    remove_file,
)
from plugin_updater.updates.registry import RegistryClient
from plugin_updater.updates.version import (
    compare_versions,
    is_newer,
    normalize_version,
    parse_version_components,
)

__all__ = [
    # Checker
    "UpdaterService",
    "UpdateChecker",
    "UpdateState",
    "OperationResult",
    # Registry
    "RegistryClient",
    # Operations
    "artifact_file_name",
    "ensure_directory",
    "find_installed_artifacts",
    "move_replace",
    "remove_file",
    # Version
    "compare_versions",
    "is_newer",
    "normalize_version",
    "parse_version_components",
]
