"""Release planning: everything that can be decided without writing.

`plan_release` reads history, classifies it, resolves the bump and renders
every artifact in memory. It never mutates the repository, so any error it
returns needs no rollback.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from semrel.core.config import Config
from semrel.core.result import Err, Ok, Result
from semrel.output.console import ConsoleProtocol, Style
from semrel.services.release.changelog import ChangelogDocument, render_entry
from semrel.services.release.classify import classify_all
from semrel.services.release.config import release_commit_message
from semrel.services.release.errors import ReleaseError
from semrel.services.release.history import History, read_history
from semrel.services.release.manifest import read_manifest, render_manifest
from semrel.services.release.model import BumpLevel, Category, ClassifiedSet
from semrel.services.release.notes import render_notes
from semrel.services.release.semver import Version, checked_version_str, resolve_bump
from semrel.services.release.vcs import ReleaseVcs

_MAX_DIRTY_LISTED = 10


@dataclass(frozen=True, slots=True)
class NothingToRelease:
    reason: str
    previous_tag: str | None


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """A fully rendered release, ready to be applied."""

    history: History
    classified: ClassifiedSet
    bump: BumpLevel
    current: Version
    next_version: Version
    tag: str
    commit_message: str
    manifest_path: Path
    manifest_text: str
    changelog_path: Path
    changelog_entry: str
    changelog_text: str
    notes_path: Path
    notes: str


type PlanOutcome = ReleasePlan | NothingToRelease


def _check_worktree(
    repo: ReleaseVcs, *, config: Config, console: ConsoleProtocol
) -> Result[None, ReleaseError]:
    if not repo.is_work_tree():
        return Err(
            ReleaseError(
                kind="not_a_repo",
                message=f"not a git work tree: {repo.path}",
                hint="Run semrel from the project root or pass --repo.",
            )
        )

    status = repo.status()
    if isinstance(status, Err):
        e = status.error
        return Err(ReleaseError(kind="git_failed", message=f"git status failed: {e.message}"))

    entries = status.value
    if not entries:
        return Ok(None)

    if config.require_clean:
        return Err(
            ReleaseError(
                kind="dirty_worktree",
                message=f"work tree has {len(entries)} uncommitted change(s)",
                hint="Commit or stash them, or set require_clean = false.",
            )
        )

    console.warning(f"work tree has {len(entries)} uncommitted change(s):")
    for entry in entries[:_MAX_DIRTY_LISTED]:
        console.print(f"  {entry.xy} {entry.path}", Style.DIM)
    if len(entries) > _MAX_DIRTY_LISTED:
        console.print(f"  ... and {len(entries) - _MAX_DIRTY_LISTED} more", Style.DIM)
    console.print(
        f"Changes to {config.manifest} and {config.changelog} will be overwritten.",
        Style.DIM,
    )
    return Ok(None)


def plan_release(
    *,
    repo: ReleaseVcs,
    config: Config,
    console: ConsoleProtocol,
    today: date,
) -> Result[PlanOutcome, ReleaseError]:
    checked = _check_worktree(repo, config=config, console=console)
    if isinstance(checked, Err):
        return checked

    history = read_history(repo)
    if isinstance(history, Err):
        return history
    hist = history.value

    if not hist.changes:
        since = f"since {hist.previous_tag}" if hist.previous_tag else "in this repository"
        return Ok(NothingToRelease(reason=f"no new commits {since}", previous_tag=hist.previous_tag))

    classified = classify_all(hist.changes)
    bump = resolve_bump(classified)
    if bump == "none":
        return Ok(NothingToRelease(reason="no releasable changes", previous_tag=hist.previous_tag))

    manifest_path = repo.path / config.manifest
    manifest = read_manifest(manifest_path)
    if isinstance(manifest, Err):
        return manifest
    current = manifest.value.version
    next_version = current.bump(bump)

    previous = hist.previous_version
    if previous is not None and next_version <= previous:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=(
                    f"next version {next_version} would not be newer than the latest "
                    f"release {hist.previous_tag}"
                ),
                hint=f"{config.manifest} says {current}; bring it in line with {hist.previous_tag}.",
            )
        )

    checked_version = checked_version_str(next_version)
    if isinstance(checked_version, Err):
        return checked_version
    version_str = checked_version.value
    tag = next_version.to_tag()

    exists = repo.tag_exists(tag)
    if isinstance(exists, Err):
        return Err(ReleaseError(kind="git_failed", message=f"failed to look up tag {tag}: {exists.error.message}"))
    if exists.value:
        return Err(
            ReleaseError(
                kind="tag_exists",
                message=f"tag already exists: {tag}",
                hint=f"Delete it (git tag -d {tag}) or fix the version in {config.manifest}.",
            )
        )

    changelog_path = repo.path / config.changelog
    document = ChangelogDocument.load(changelog_path)
    if isinstance(document, Err):
        return document
    if document.value.has_version(next_version):
        return Err(
            ReleaseError(
                kind="invalid_changelog",
                message=f"{config.changelog} already has an entry for {next_version}",
                hint="Remove the stale entry or fix the version in the manifest.",
            )
        )

    manifest_text = render_manifest(manifest.value, next_version)
    if isinstance(manifest_text, Err):
        return manifest_text

    entry = render_entry(
        version=next_version,
        day=today,
        classified=classified,
        commit_url=config.commit_url,
    )

    return Ok(
        ReleasePlan(
            history=hist,
            classified=classified,
            bump=bump,
            current=current,
            next_version=next_version,
            tag=tag,
            commit_message=release_commit_message(version_str),
            manifest_path=manifest_path,
            manifest_text=manifest_text.value,
            changelog_path=changelog_path,
            changelog_entry=entry,
            changelog_text=document.value.with_entry(entry),
            notes_path=repo.path / config.notes,
            notes=render_notes(classified, commit_url=config.commit_url),
        )
    )


def print_plan_summary(plan: ReleasePlan, console: ConsoleProtocol) -> None:
    """Previous release, category counts and the version change."""
    classified = plan.classified
    source = "merge commits" if plan.history.merges_only else "commits"
    console.print(f"previous release: {plan.history.previous_tag or 'none'}", Style.DIM)
    console.print(f"{classified.total} {source} since then", Style.DIM)

    fixes = classified.count(Category.FIX)
    features = classified.count(Category.FEATURE)
    breaking = classified.count(Category.BREAKING)
    other = classified.total - fixes - features - breaking
    console.print(
        f"  breaking: {breaking}  features: {features}  fixes: {fixes}  other: {other}",
        Style.DIM,
    )
    console.print(f"{plan.bump} bump: {plan.current} -> {plan.next_version}", Style.BOLD)
