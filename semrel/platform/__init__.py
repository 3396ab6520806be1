"""Thin wrappers over the operating system: subprocesses and files."""

from .files import FileSnapshot, atomic_write_text, restore_snapshot, take_snapshot
from .process import ProcessError, run

__all__ = [
    "FileSnapshot",
    "ProcessError",
    "atomic_write_text",
    "restore_snapshot",
    "run",
    "take_snapshot",
]
