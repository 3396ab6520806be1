"""Shared fixtures for release service tests."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pytest

from semrel.core.result import Err, Ok, Result
from semrel.git.repository import GitError, StatusEntry
from semrel.services.release.model import Change


class FakeVcs:
    """In-memory stand-in for Repository.

    Artifacts are real files under `path`; commits, tags and the index are
    simulated. `failures` maps an operation name ("commit", "tag", ...) to the
    GitError it should return.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.work_tree = True
        self.status_entries: tuple[StatusEntry, ...] = ()
        self.tags: dict[str, str] = {}
        self.changes: list[Change] = []
        self.merges: list[Change] = []
        self.commits: list[tuple[str, str]] = [("0" * 40, "initial")]
        self.staged: set[str] = set()
        self.failures: dict[str, GitError] = {}
        self.calls: list[str] = []

    # -- test helpers ----------------------------------------------------------

    def write_package_json(self, version: str) -> Path:
        path = self.path / "package.json"
        path.write_text(json.dumps({"name": "demo", "version": version}, indent=2) + "\n", encoding="utf-8")
        return path

    def fail(self, op: str, message: str = "boom") -> None:
        self.failures[op] = GitError(command=op, message=message)

    def _check(self, op: str) -> Err[GitError] | None:
        self.calls.append(op)
        error = self.failures.get(op)
        return Err(error) if error is not None else None

    # -- ReleaseVcs ------------------------------------------------------------

    def is_work_tree(self) -> bool:
        return self.work_tree

    def has_commits(self) -> bool:
        return bool(self.commits)

    def status(self) -> Result[tuple[StatusEntry, ...], GitError]:
        return self._check("status") or Ok(self.status_entries)

    def list_tags(self, pattern: str) -> Result[list[str], GitError]:
        del pattern
        return self._check("list_tags") or Ok(list(reversed(self.tags)))

    def tag_exists(self, name: str) -> Result[bool, GitError]:
        return self._check("tag_exists") or Ok(name in self.tags)

    def log(self, rev_range: str, *, fmt: str, merges_only: bool) -> Result[str, GitError]:
        del rev_range, fmt
        failed = self._check("log")
        if failed is not None:
            return failed
        source = self.merges if merges_only else self.changes + self.merges
        return Ok("".join(f"{c.id}\x1f{c.subject}\x1f{c.body}\x1e\n" for c in source))

    def head_sha(self) -> Result[str, GitError]:
        return self._check("head_sha") or Ok(self.commits[-1][0])

    def head_subject(self) -> Result[str, GitError]:
        return self._check("head_subject") or Ok(self.commits[-1][1])

    def add(self, paths: Sequence[str]) -> Result[None, GitError]:
        failed = self._check("add")
        if failed is not None:
            return failed
        self.staged.update(paths)
        return Ok(None)

    def unstage(self, paths: Sequence[str]) -> Result[None, GitError]:
        failed = self._check("unstage")
        if failed is not None:
            return failed
        self.staged.difference_update(paths)
        return Ok(None)

    def commit(self, message: str, *, paths: Sequence[str]) -> Result[None, GitError]:
        failed = self._check("commit")
        if failed is not None:
            return failed
        self.staged.difference_update(paths)
        self.commits.append((f"{len(self.commits):x}".rjust(40, "a"), message))
        return Ok(None)

    def create_annotated_tag(self, name: str, *, message: str, target: str) -> Result[None, GitError]:
        del message
        failed = self._check("tag")
        if failed is not None:
            return failed
        self.tags[name] = target
        return Ok(None)

    def delete_tag(self, name: str) -> Result[None, GitError]:
        failed = self._check("delete_tag")
        if failed is not None:
            return failed
        self.tags.pop(name, None)
        return Ok(None)

    def reset_last_commit(self) -> Result[None, GitError]:
        failed = self._check("reset")
        if failed is not None:
            return failed
        self.commits.pop()
        return Ok(None)


@pytest.fixture
def vcs(tmp_path: Path) -> FakeVcs:
    return FakeVcs(tmp_path)
