"""History reader: which commits are candidates for the next release."""

from __future__ import annotations

import re
from dataclasses import dataclass

from semrel.core.result import Err, Ok, Result
from semrel.git.repository import GitError
from semrel.services.release.errors import ReleaseError
from semrel.services.release.model import Change
from semrel.services.release.semver import TAG_PREFIX, Version, parse_tag
from semrel.services.release.vcs import ReleaseVcs


# Unit separator between fields, record separator between commits.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
LOG_FORMAT = "%H%x1f%s%x1f%b%x1e"

_ID_RE = re.compile(r"^[0-9a-f]{7,64}$")


@dataclass(frozen=True, slots=True)
class History:
    """Commits since the previous release.

    Attributes:
        previous_tag: Last release tag, or None for the first release.
        changes: Commits in range, oldest first.
        merges_only: True if merge commits were found and used exclusively.
    """

    previous_tag: str | None
    changes: tuple[Change, ...]
    merges_only: bool

    @property
    def previous_version(self) -> Version | None:
        if self.previous_tag is None:
            return None
        return parse_tag(self.previous_tag)


def _git_error(e: GitError, *, what: str) -> ReleaseError:
    return ReleaseError(
        kind="git_failed",
        message=f"failed to {what}: git {e.command}: {e.message}",
        hint="Check that git works in this repository, then retry.",
    )


def parse_log(output: str) -> tuple[Change, ...]:
    """Parse `git log` output produced with LOG_FORMAT.

    Records with a malformed id or an empty subject are dropped.
    """
    changes: list[Change] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FIELD_SEP)
        sha = parts[0].strip()
        subject = parts[1].strip() if len(parts) > 1 else ""
        body = _FIELD_SEP.join(parts[2:]).strip() if len(parts) > 2 else ""
        if not _ID_RE.match(sha) or not subject:
            continue
        changes.append(Change(id=sha, subject=subject, body=body))
    return tuple(changes)


def find_previous_tag(repo: ReleaseVcs) -> Result[str | None, ReleaseError]:
    """Highest strict vMAJOR.MINOR.PATCH tag, or None if there is none."""
    tags = repo.list_tags(f"{TAG_PREFIX}*")
    if isinstance(tags, Err):
        return Err(_git_error(tags.error, what="list release tags"))

    for tag in tags.value:
        if parse_tag(tag) is not None:
            return Ok(tag)
    return Ok(None)


def read_history(repo: ReleaseVcs) -> Result[History, ReleaseError]:
    """Commits since the previous release tag.

    Merge commits stand in for reviewed units of work: if the range holds any,
    only merges are returned. Otherwise every commit is returned.
    """
    previous = find_previous_tag(repo)
    if isinstance(previous, Err):
        return previous
    previous_tag = previous.value

    if not repo.has_commits():
        return Ok(History(previous_tag=previous_tag, changes=(), merges_only=False))

    rev_range = f"{previous_tag}..HEAD" if previous_tag else "HEAD"

    merges = repo.log(rev_range, fmt=LOG_FORMAT, merges_only=True)
    if isinstance(merges, Err):
        return Err(_git_error(merges.error, what="read merge history"))
    merge_changes = parse_log(merges.value)
    if merge_changes:
        return Ok(History(previous_tag=previous_tag, changes=merge_changes, merges_only=True))

    everything = repo.log(rev_range, fmt=LOG_FORMAT, merges_only=False)
    if isinstance(everything, Err):
        return Err(_git_error(everything.error, what="read history"))
    return Ok(
        History(
            previous_tag=previous_tag,
            changes=parse_log(everything.value),
            merges_only=False,
        )
    )
