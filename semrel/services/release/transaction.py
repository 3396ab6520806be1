"""Release transaction coordinator.

Drives a planned release through its writing steps:

    idle -> computing -> applying_version -> applying_changelog
         -> committing -> tagging -> publishing_notes -> done

Every completed step registers a compensating action. When a step fails,
the actions run in reverse order (rolling_back -> rolled_back) and the result
of each one is collected in a RollbackReport. Rollback never raises; a
compensation that cannot complete is reported with the command that finishes
it by hand.

Writing release notes is the only step whose failure is not fatal: the commit
and tag are already in place, so the run warns and still reaches done.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path

from semrel.core.config import Config
from semrel.core.result import Err, Ok, Result
from semrel.git.repository import GitError
from semrel.output.console import ConsoleProtocol, Style
from semrel.platform.files import FileSnapshot, atomic_write_text, restore_snapshot, take_snapshot
from semrel.services.release.config import is_release_commit, tag_message
from semrel.services.release.errors import ReleaseError
from semrel.services.release.fsm import (
    FINISH,
    StepHandler,
    StepOutcome,
    advance,
    run_state_machine,
)
from semrel.services.release.notes import write_notes
from semrel.services.release.planner import (
    NothingToRelease,
    ReleasePlan,
    plan_release,
    print_plan_summary,
)
from semrel.services.release.semver import checked_version_str
from semrel.services.release.vcs import ReleaseVcs


class TxState(Enum):
    IDLE = "idle"
    COMPUTING = "computing"
    APPLYING_VERSION = "applying_version"
    APPLYING_CHANGELOG = "applying_changelog"
    COMMITTING = "committing"
    TAGGING = "tagging"
    PUBLISHING_NOTES = "publishing_notes"
    DONE = "done"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"

    def __str__(self) -> str:
        return self.value


_STATE_LABELS: dict[TxState, str] = {
    TxState.COMPUTING: "Computing release",
    TxState.APPLYING_VERSION: "Writing version",
    TxState.APPLYING_CHANGELOG: "Writing changelog",
    TxState.COMMITTING: "Committing",
    TxState.TAGGING: "Tagging",
    TxState.PUBLISHING_NOTES: "Writing release notes",
    TxState.DONE: "Done",
    TxState.ROLLING_BACK: "Rolling back",
    TxState.ROLLED_BACK: "Rolled back",
}


@dataclass(slots=True)
class TransactionState:
    """Which mutations of the current run are in effect."""

    version_written: bool = False
    changelog_written: bool = False
    commit_created: bool = False
    marker_created: bool = False


type UndoAction = Callable[[], Result[None, str]]


@dataclass(frozen=True, slots=True)
class Compensation:
    """How to undo one completed step.

    Attributes:
        name: Short description, e.g. "delete tag v1.2.0".
        undo: Performs the undo; Err carries the reason it could not.
        manual: Shell command that finishes the undo by hand.
    """

    name: str
    undo: UndoAction
    manual: str


@dataclass(frozen=True, slots=True)
class RollbackStep:
    name: str
    ok: bool
    detail: str | None = None
    manual: str | None = None


@dataclass(frozen=True, slots=True)
class RollbackReport:
    steps: tuple[RollbackStep, ...] = ()

    @property
    def clean(self) -> bool:
        return all(s.ok for s in self.steps)

    @property
    def undone(self) -> tuple[RollbackStep, ...]:
        return tuple(s for s in self.steps if s.ok)

    @property
    def failed(self) -> tuple[RollbackStep, ...]:
        return tuple(s for s in self.steps if not s.ok)


@dataclass(frozen=True, slots=True)
class Released:
    plan: ReleasePlan
    commit_sha: str
    notes_path: Path | None


@dataclass(frozen=True, slots=True)
class ReleaseFailure:
    """A run that stopped on an error.

    `rollback` is empty when the run failed before writing anything.
    """

    error: ReleaseError
    failed_in: TxState
    rollback: RollbackReport = field(default_factory=RollbackReport)


type TransactionOutcome = Released | NothingToRelease


def _git_failed(e: GitError, *, what: str) -> ReleaseError:
    hint = "Check that git works in this repository, then retry."
    if e.attempts > 1:
        hint = f"Gave up after {e.attempts} attempts; check for other running git processes."
    return ReleaseError(kind="git_failed", message=f"failed to {what}: {e.message}", hint=hint)


class ReleaseTransaction:
    """One release run against one repository.

    Not reusable: create a new instance per run.
    """

    def __init__(
        self,
        *,
        repo: ReleaseVcs,
        config: Config,
        console: ConsoleProtocol,
        today: date,
    ) -> None:
        self._repo = repo
        self._config = config
        self._console = console
        self._today = today
        self.current = TxState.IDLE
        self.state = TransactionState()
        self._compensations: list[Compensation] = []
        self._commit_sha: str | None = None
        self._notes_path: Path | None = None

    @property
    def compensations(self) -> tuple[Compensation, ...]:
        return tuple(self._compensations)

    def execute(self) -> Result[TransactionOutcome, ReleaseFailure]:
        """Plan the release and, if there is something to release, apply it."""
        self._enter(TxState.COMPUTING)
        planned = plan_release(
            repo=self._repo,
            config=self._config,
            console=self._console,
            today=self._today,
        )
        if isinstance(planned, Err):
            return Err(ReleaseFailure(error=planned.error, failed_in=TxState.COMPUTING))

        outcome = planned.value
        if isinstance(outcome, NothingToRelease):
            self.current = TxState.DONE
            return Ok(outcome)

        print_plan_summary(outcome, self._console)
        return self.apply(outcome)

    def apply(self, plan: ReleasePlan) -> Result[Released, ReleaseFailure]:
        """Write, commit and tag a computed plan; roll back on failure."""
        handlers: dict[TxState, StepHandler[TxState]] = {
            TxState.APPLYING_VERSION: lambda: self._apply_version(plan),
            TxState.APPLYING_CHANGELOG: lambda: self._apply_changelog(plan),
            TxState.COMMITTING: lambda: self._commit(plan),
            TxState.TAGGING: lambda: self._tag(plan),
            TxState.PUBLISHING_NOTES: lambda: self._publish_notes(plan),
            TxState.DONE: lambda: Ok(FINISH),
        }

        result = run_state_machine(
            initial_step=TxState.APPLYING_VERSION,
            handlers=handlers,
            on_enter=self._enter,
        )
        if isinstance(result, Err):
            failed = result.error
            self._console.error(failed.error.pretty())
            report = self.rollback()
            return Err(ReleaseFailure(error=failed.error, failed_in=failed.step, rollback=report))

        assert self._commit_sha is not None
        return Ok(Released(plan=plan, commit_sha=self._commit_sha, notes_path=self._notes_path))

    def rollback(self) -> RollbackReport:
        """Run registered compensations newest first. Never raises."""
        self._enter(TxState.ROLLING_BACK)
        steps: list[RollbackStep] = []

        while self._compensations:
            comp = self._compensations.pop()
            try:
                result = comp.undo()
            except Exception as e:  # rollback reports every failure instead of raising
                result = Err(f"{type(e).__name__}: {e}")

            match result:
                case Ok(_):
                    self._console.print(f"  undone: {comp.name}", Style.DIM)
                    steps.append(RollbackStep(name=comp.name, ok=True))
                case Err(reason):
                    self._console.warning(f"could not {comp.name}: {reason}")
                    steps.append(RollbackStep(name=comp.name, ok=False, detail=reason, manual=comp.manual))

        self._enter(TxState.ROLLED_BACK)
        return RollbackReport(steps=tuple(steps))

    # -- steps -----------------------------------------------------------------

    def _enter(self, state: TxState) -> None:
        self.current = state
        label = _STATE_LABELS.get(state)
        if label is not None:
            self._console.print(f"-> {label}", Style.INFO)

    def _register(self, name: str, undo: UndoAction, *, manual: str) -> None:
        self._compensations.append(Compensation(name=name, undo=undo, manual=manual))

    def _write_artifact(self, path: Path, text: str, *, rel: str) -> Result[None, ReleaseError]:
        try:
            snapshot = take_snapshot(path)
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"failed to read {rel}: {e}"))

        try:
            atomic_write_text(path, text)
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"failed to write {rel}: {e}"))

        if snapshot.existed:
            manual = f"git checkout -- {rel}  # committed version; edits made before the run are lost"
        else:
            manual = f"rm {rel}"
        self._register(f"restore {rel}", lambda: self._restore(snapshot), manual=manual)
        self._console.print(f"  wrote {rel}", Style.DIM)
        return Ok(None)

    def _restore(self, snapshot: FileSnapshot) -> Result[None, str]:
        if self.state.commit_created:
            return Err("the release commit is still in place")
        try:
            restore_snapshot(snapshot)
        except OSError as e:
            return Err(str(e))
        return Ok(None)

    def _apply_version(self, plan: ReleasePlan) -> Result[StepOutcome[TxState], ReleaseError]:
        written = self._write_artifact(plan.manifest_path, plan.manifest_text, rel=self._config.manifest)
        if isinstance(written, Err):
            return written
        self.state.version_written = True
        return Ok(advance(TxState.APPLYING_CHANGELOG))

    def _apply_changelog(self, plan: ReleasePlan) -> Result[StepOutcome[TxState], ReleaseError]:
        written = self._write_artifact(plan.changelog_path, plan.changelog_text, rel=self._config.changelog)
        if isinstance(written, Err):
            return written
        self.state.changelog_written = True
        return Ok(advance(TxState.COMMITTING))

    def _commit(self, plan: ReleasePlan) -> Result[StepOutcome[TxState], ReleaseError]:
        paths = [self._config.manifest, self._config.changelog]

        added = self._repo.add(paths)
        if isinstance(added, Err):
            return Err(_git_failed(added.error, what="stage release files"))
        self._register(
            "unstage release files",
            lambda: self._unstage(paths),
            manual=f"git reset -q -- {' '.join(paths)}",
        )

        committed = self._repo.commit(plan.commit_message, paths=paths)
        if isinstance(committed, Err):
            return Err(_git_failed(committed.error, what="create the release commit"))
        self.state.commit_created = True
        version = str(plan.next_version)
        self._register(
            f"undo release commit {version}",
            lambda: self._undo_commit(version),
            manual="git reset --keep HEAD~1",
        )

        sha = self._repo.head_sha()
        if isinstance(sha, Err):
            return Err(_git_failed(sha.error, what="resolve the release commit"))
        self._commit_sha = sha.value
        self._console.print(f"  {plan.commit_message} ({sha.value[:7]})", Style.DIM)
        return Ok(advance(TxState.TAGGING))

    def _unstage(self, paths: list[str]) -> Result[None, str]:
        if self.state.commit_created:
            return Err("the release commit is still in place")
        result = self._repo.unstage(paths)
        if isinstance(result, Err):
            return Err(result.error.message)
        return Ok(None)

    def _undo_commit(self, version: str) -> Result[None, str]:
        subject = self._repo.head_subject()
        if isinstance(subject, Err):
            return Err(subject.error.message)
        if not is_release_commit(subject.value, version=version):
            return Err(f"HEAD is not the release commit ({subject.value!r}); left untouched")

        reset = self._repo.reset_last_commit()
        if isinstance(reset, Err):
            return Err(reset.error.message)
        self.state.commit_created = False
        self._console.print("  note: changes staged before the run are now unstaged (work tree kept)", Style.DIM)
        return Ok(None)

    def _tag(self, plan: ReleasePlan) -> Result[StepOutcome[TxState], ReleaseError]:
        checked = checked_version_str(plan.next_version)
        if isinstance(checked, Err):
            return checked
        assert self._commit_sha is not None

        tag = plan.tag
        created = self._repo.create_annotated_tag(tag, message=tag_message(tag), target=self._commit_sha)
        if isinstance(created, Err):
            return Err(_git_failed(created.error, what=f"create tag {tag}"))
        self.state.marker_created = True
        self._register(f"delete tag {tag}", lambda: self._delete_tag(tag), manual=f"git tag -d {tag}")
        self._console.print(f"  tagged {tag}", Style.DIM)
        return Ok(advance(TxState.PUBLISHING_NOTES))

    def _delete_tag(self, tag: str) -> Result[None, str]:
        result = self._repo.delete_tag(tag)
        if isinstance(result, Err):
            return Err(result.error.message)
        self.state.marker_created = False
        return Ok(None)

    def _publish_notes(self, plan: ReleasePlan) -> Result[StepOutcome[TxState], ReleaseError]:
        written = write_notes(path=plan.notes_path, notes=plan.notes)
        match written:
            case Ok(path):
                self._notes_path = path
                self._console.print(f"  wrote {self._config.notes}", Style.DIM)
            case Err(e):
                self._console.warning(f"release notes not written: {e.pretty()}")
                self._console.print("The release itself is complete; write the notes by hand.", Style.DIM)
        return Ok(advance(TxState.DONE))
