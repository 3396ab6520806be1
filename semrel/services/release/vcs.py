"""Version-control interface consumed by the release engine."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from semrel.core.result import Result
from semrel.git.repository import GitError, StatusEntry


class ReleaseVcs(Protocol):
    """Query and mutation operations the release transaction needs.

    `semrel.git.Repository` implements this against a real work tree; tests
    substitute an in-memory fake.
    """

    path: Path

    def is_work_tree(self) -> bool: ...

    def has_commits(self) -> bool: ...

    def status(self) -> Result[tuple[StatusEntry, ...], GitError]: ...

    def list_tags(self, pattern: str) -> Result[list[str], GitError]: ...

    def tag_exists(self, name: str) -> Result[bool, GitError]: ...

    def log(self, rev_range: str, *, fmt: str, merges_only: bool) -> Result[str, GitError]: ...

    def head_sha(self) -> Result[str, GitError]: ...

    def head_subject(self) -> Result[str, GitError]: ...

    def add(self, paths: Sequence[str]) -> Result[None, GitError]: ...

    def unstage(self, paths: Sequence[str]) -> Result[None, GitError]: ...

    def commit(self, message: str, *, paths: Sequence[str]) -> Result[None, GitError]: ...

    def create_annotated_tag(
        self, name: str, *, message: str, target: str
    ) -> Result[None, GitError]: ...

    def delete_tag(self, name: str) -> Result[None, GitError]: ...

    def reset_last_commit(self) -> Result[None, GitError]: ...
