"""
Filesystem utilities for phpkeeper.

Safe helpers for reading and atomically rewriting ``composer.json`` (and the
response cache files), taking timestamped backups, and locating the
manifest. All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from phpkeeper.utils.logger import get_logger
from phpkeeper.exceptions import FileOperationError
from phpkeeper.constants import COMPOSER_JSON, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure *path* is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Write *content* next to *target* and move it into place."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Removed temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to remove temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing anything larger than *max_size* bytes.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed size in bytes (``None`` disables the limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FileOperationError: The file is missing, too large or unreadable.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def create_backup(file_path: PathLike) -> Path:
    """Copy *file_path* to ``<name>.<timestamp>.backup`` beside it.

    Example::

        >>> create_backup("composer.json")
        PosixPath('/project/composer.json.20240131_101502_123456.backup')
    """
    path = _validated_file(Path(file_path))
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.with_name(f"{path.name}.{timestamp}.backup")

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created backup: %s", backup_path)
    return backup_path


def restore_backup(backup_path: PathLike, target_path: PathLike) -> None:
    """Copy *backup_path* back over *target_path*."""
    backup = Path(backup_path)
    target = Path(target_path)

    if not backup.exists():
        raise FileOperationError(
            f"Backup file not found: {backup}",
            file_path=str(backup),
            operation="restore",
        )

    logger.debug("Restoring %s from backup %s", target, backup)
    try:
        shutil.copy2(backup, target)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to restore backup: {exc}",
            file_path=str(target),
            operation="restore",
            original_error=exc,
        ) from exc


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    backup: bool = False,
) -> Optional[Path]:
    """Atomically replace *file_path* with *content*.

    With ``backup`` the current file is copied aside first and put
    back if the write fails.

    Returns:
        Path to the backup, if one was taken.
    """
    path = Path(file_path)
    backup_path: Optional[Path] = None

    if backup and path.is_file():
        backup_path = create_backup(path)

    try:
        _atomic_write(path, content)
    except FileOperationError:
        if backup_path is not None:
            try:
                restore_backup(backup_path, path)
            except FileOperationError as restore_exc:
                logger.error("Could not restore %s: %s", path, restore_exc)
        raise

    return backup_path


def find_composer_json(
    start: PathLike = ".",
    *,
    search_parents: bool = True,
) -> Optional[Path]:
    """Locate ``composer.json`` in *start* or, optionally, its parents."""
    directory = Path(start).resolve()
    candidates = [directory, *directory.parents] if search_parents else [directory]

    for candidate in candidates:
        manifest = candidate / COMPOSER_JSON
        if manifest.is_file():
            return manifest
    return None
