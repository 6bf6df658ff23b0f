"""
Filesystem operations for staging and installing plugin artifacts.

This module implements the file handling of the update lifecycle:
- Staging directory creation
- Deterministic artifact file names
- Discovery and removal of installed artifacts
- Replacing move of the staged artifact into the installation directory

The move uses os.replace, which is atomic when source and target share a
filesystem. Across filesystems the file is copied next to the target first
and then renamed over it, so the target is never half-written.
"""

from __future__ import annotations

import errno
import os
import shutil
from pathlib import Path

from plugin_updater.errors import FileOperationError
from plugin_updater.logging import get_logger

logger = get_logger(__name__)

# Characters that would let a registry version escape the target directory
_UNSAFE_NAME_CHARS = str.maketrans({"/": "_", "\\": "_", os.sep: "_"})


def ensure_directory(path: Path, *, mode: int = 0o755) -> Path:
    """
    Ensure a directory exists, creating parents as needed.

    Args:
        path: Path to the directory.
        mode: Directory permissions for newly created directories.

    Returns:
        The directory path.

    Raises:
        FileOperationError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, mode=mode, exist_ok=True)
        return path
    except OSError as e:
        raise FileOperationError(
            f"Failed to create directory: {path}",
            details={"path": str(path), "error": str(e)},
        ) from e


def artifact_file_name(name: str, version: str, extension: str = ".jar") -> str:
    """
    Build the file name of an artifact version.

    Example:
        >>> artifact_file_name("MyPlugin", "1.1.0")
        'MyPlugin-1.1.0.jar'
    """
    return f"{name}-{version.translate(_UNSAFE_NAME_CHARS)}{extension}"


def find_installed_artifacts(
    install_dir: Path,
    name: str,
    extension: str = ".jar",
) -> list[Path]:
    """
    List installed artifact files of one plugin.

    A file matches when its name starts with the artifact name and ends with
    the extension. A missing installation directory yields no matches.

    Args:
        install_dir: Directory holding installed artifacts.
        name: Artifact name prefix.
        extension: Artifact file extension.

    Returns:
        Matching files, sorted by name.
    """
    if not install_dir.is_dir():
        return []

    return sorted(
        entry
        for entry in install_dir.iterdir()
        if entry.is_file()
        and entry.name.startswith(name)
        and entry.name.lower().endswith(extension)
    )


def remove_file(path: Path) -> bool:
    """
    Delete a file if it exists.

    Returns:
        True if the file was deleted, False if it did not exist.

    Raises:
        FileOperationError: If the file exists but cannot be deleted.
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FileOperationError(
            f"Failed to delete {path}: {e}",
            details={"path": str(path), "error": str(e)},
        ) from e


def move_replace(source: Path, target: Path) -> Path:
    """
    Move source to target, replacing any existing file at target.

    Args:
        source: File to move.
        target: Destination path.

    Returns:
        The target path.

    Raises:
        FileOperationError: If the move fails.
    """
    try:
        os.replace(source, target)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise FileOperationError(
                f"Failed to move {source} to {target}: {e}",
                details={"source": str(source), "target": str(target), "error": str(e)},
            ) from e
        _copy_replace(source, target)

    logger.debug(
        "Moved file", extra={"source": str(source), "target": str(target)}
    )
    return target


def _copy_replace(source: Path, target: Path) -> None:
    """Cross-filesystem fallback for move_replace."""
    temp = target.with_name(f".{target.name}.tmp")
    try:
        shutil.copy2(source, temp)
        os.replace(temp, target)
        source.unlink()
    except OSError as e:
        temp.unlink(missing_ok=True)
        raise FileOperationError(
            f"Failed to move {source} to {target}: {e}",
            details={"source": str(source), "target": str(target), "error": str(e)},
        ) from e
