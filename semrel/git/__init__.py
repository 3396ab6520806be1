"""Git access for the release engine."""

from .repository import GitError, Repository, StatusEntry, is_transient

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
    "is_transient",
]
