"""File utilities for GuardFX storage."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def ensure_private_dir(directory: Path) -> None:
    """Create a directory with owner-only permissions."""
    directory.mkdir(parents=True, exist_ok=True)
    if os.name != "nt":
        os.chmod(directory, 0o700)


def atomic_write_text(path: Path, text: str) -> None:
    """Write text atomically using temp file + fsync + rename.

    A crash at any point leaves either the old file intact or the new
    file fully written. The result is readable by the owner only.
    """
    directory = path.parent
    ensure_private_dir(directory)

    # Temp file in the same directory so the rename stays on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=directory,
        prefix=f".{path.stem}_",
        suffix=".tmp",
    )
    try:
        os.write(fd, text.encode("utf-8"))
        os.fsync(fd)
        os.close(fd)

        # Set permissions before rename (temp file inherits umask)
        if os.name != "nt":
            os.chmod(temp_path, 0o600)

        os.replace(temp_path, path)
        _fsync_directory(directory)

    except Exception:
        if not _is_fd_closed(fd):
            os.close(fd)
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def _fsync_directory(directory: Path) -> None:
    """Sync directory so the rename is persisted. No-op on Windows."""
    if os.name == "nt":
        return

    dir_fd = os.open(str(directory), os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def _is_fd_closed(fd: int) -> bool:
    """Check if a file descriptor is already closed."""
    try:
        os.fstat(fd)
        return False
    except OSError:
        return True
