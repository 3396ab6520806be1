"""Filesystem helpers: atomic writes and byte-exact snapshots."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

__all__ = ["FileSnapshot", "atomic_write_text", "restore_snapshot", "take_snapshot"]


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Exact content of a file at a point in time.

    Attributes:
        path: File location.
        content: Raw bytes, or None if the file did not exist.
    """

    path: Path
    content: bytes | None

    @property
    def existed(self) -> bool:
        return self.content is not None


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    Newlines are written as given; no platform translation.
    """
    _atomic_write_bytes(path, content.encode(encoding))


def take_snapshot(path: Path) -> FileSnapshot:
    """Capture the current bytes of path.

    Raises:
        OSError: If the file exists but cannot be read.
    """
    try:
        return FileSnapshot(path=path, content=path.read_bytes())
    except FileNotFoundError:
        return FileSnapshot(path=path, content=None)


def restore_snapshot(snapshot: FileSnapshot) -> None:
    """Put a file back to its captured state.

    A file that did not exist when captured is removed.

    Raises:
        OSError: If the file cannot be written or removed.
    """
    if snapshot.content is None:
        snapshot.path.unlink(missing_ok=True)
        return
    _atomic_write_bytes(snapshot.path, snapshot.content)
