"""Git repository abstraction.

This module provides the Repository class used by the release engine for
every query and mutation against version control. All operations return
Result types; nothing raises for a failed git call.

Failures whose stderr looks like lock contention, a timeout or a dropped
connection are classified as transient and retried with exponential backoff
(see RetryConfig). Anything else fails on the first attempt.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.list_tags("v*"):
        case Ok(tags):
            print(tags[0] if tags else "no release yet")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from time import sleep

from semrel.core.config import RetryConfig
from semrel.core.result import Err, Ok, Result
from semrel.output.console import ConsoleProtocol, Style
from semrel.platform.process import ProcessError
from semrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

# Lowercased stderr fragments that indicate a retryable failure.
_TRANSIENT_MARKERS = (
    "index.lock",
    "could not lock",
    "cannot lock ref",
    "unable to create",
    "another git process",
    "resource temporarily unavailable",
    "connection reset",
    "connection timed out",
    "could not read from remote",
)

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
    "is_transient",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "commit")
        message: Error message (stderr, or a summary)
        returncode: Process return code
        transient: True if the last failure was classified as retryable
        attempts: How many attempts were made before giving up; a transient
            error that reaches the caller has exhausted its retries
    """

    command: str
    message: str
    returncode: int = 1
    transient: bool = False
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of `git status --porcelain`.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


def is_transient(error: ProcessError) -> bool:
    """Classify a failed git process as retryable."""
    if error.timed_out:
        return True
    text = f"{error.stderr}\n{error.stdout}".lower()
    return any(marker in text for marker in _TRANSIENT_MARKERS)


class Repository:
    """Git repository used as the release target.

    Attributes:
        path: Path to the work tree root
    """

    def __init__(
        self,
        path: Path,
        *,
        retry: RetryConfig | None = None,
        console: ConsoleProtocol | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize repository.

        Args:
            path: Path to the work tree root
            retry: Backoff policy for transient failures
            console: Where retry warnings and (verbose) commands are printed
            verbose: Echo every git command before running it
        """
        self.path = path
        self.retry = retry or RetryConfig()
        self._console = console
        self._verbose = verbose

    # -- queries ---------------------------------------------------------------

    def is_work_tree(self) -> bool:
        """True if path is inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"], retry=False)
        match result:
            case Ok(stdout):
                return stdout.strip() == "true"
            case Err(_):
                return False

    def has_commits(self) -> bool:
        """True if HEAD points at a commit (false in a freshly initialized repo)."""
        result = self._run(["rev-parse", "--verify", "--quiet", "HEAD"], retry=False)
        return isinstance(result, Ok)

    def status(self) -> Result[tuple[StatusEntry, ...], GitError]:
        """Uncommitted changes in the work tree, including untracked files."""
        result = self._run(["status", "--porcelain"])
        if isinstance(result, Err):
            return result

        entries: list[StatusEntry] = []
        for line in result.value.splitlines():
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))
        return Ok(tuple(entries))

    def list_tags(self, pattern: str) -> Result[list[str], GitError]:
        """Tags matching a glob, highest version first."""
        result = self._run(["tag", "-l", pattern, "--sort=-v:refname"])
        if isinstance(result, Err):
            return result
        return Ok([ln.strip() for ln in result.value.splitlines() if ln.strip()])

    def tag_exists(self, name: str) -> Result[bool, GitError]:
        result = self._run(["tag", "-l", name])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip() == name)

    def log(self, rev_range: str, *, fmt: str, merges_only: bool) -> Result[str, GitError]:
        """Raw `git log` output for a range, oldest first.

        Args:
            rev_range: Revision range, e.g. "v1.2.3..HEAD" or "HEAD"
            fmt: --pretty=format string
            merges_only: Restrict to commits with more than one parent
        """
        args = ["log", rev_range, "--reverse", f"--pretty=format:{fmt}"]
        if merges_only:
            args.append("--merges")
        return self._run(args)

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def head_subject(self) -> Result[str, GitError]:
        """Subject line of the most recent commit."""
        result = self._run(["log", "-1", "--pretty=%s"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    # -- mutations -------------------------------------------------------------

    def add(self, paths: Sequence[str]) -> Result[None, GitError]:
        result = self._run(["add", "--", *paths])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def unstage(self, paths: Sequence[str]) -> Result[None, GitError]:
        """Reset index entries for paths back to HEAD; the work tree is untouched."""
        result = self._run(["reset", "-q", "--", *paths])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def commit(self, message: str, *, paths: Sequence[str]) -> Result[None, GitError]:
        """Commit the given paths only.

        Other staged changes in the index are left out of the commit.
        """
        result = self._run(["commit", "-m", message, "--", *paths])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_annotated_tag(self, name: str, *, message: str, target: str) -> Result[None, GitError]:
        result = self._run(["tag", "-a", name, "-m", message, target])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def delete_tag(self, name: str) -> Result[None, GitError]:
        result = self._run(["tag", "-d", name])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def reset_last_commit(self) -> Result[None, GitError]:
        """Drop HEAD, keeping unrelated local changes in the work tree.

        Uses `reset --keep`, which refuses (instead of discarding) when a
        local change touches a file that the reset would overwrite. The index
        is reset too: anything staged before the release ends up unstaged,
        with its content still in the work tree.
        """
        result = self._run(["reset", "--keep", "HEAD~1"])
        if isinstance(result, Err):
            return result
        return Ok(None)

    # -- plumbing --------------------------------------------------------------

    def _run(self, args: list[str], *, retry: bool = True) -> Result[str, GitError]:
        """Run a git command, retrying transient failures with backoff."""
        command = args[0] if args else ""
        max_attempts = self.retry.attempts if retry else 1

        if self._verbose and self._console is not None:
            self._console.print(f"git {' '.join(args)}", Style.DIM)

        last: ProcessError | None = None
        for attempt in range(max_attempts):
            result = run_process(
                ["git", "-C", str(self.path), *args],
                cwd=self.path,
                timeout=_GIT_TIMEOUT_SECONDS,
            )
            if isinstance(result, Ok):
                return result

            last = result.error
            if not is_transient(last) or attempt == max_attempts - 1:
                break

            delay = self.retry.delay_for(attempt)
            if self._console is not None:
                self._console.warning(
                    f"git {command} failed (attempt {attempt + 1}/{max_attempts}), "
                    f"retrying in {delay:g}s"
                )
            sleep(delay)

        assert last is not None
        attempts = attempt + 1
        message = last.stderr.strip() or last.stdout.strip() or str(last)
        if attempts > 1:
            message = f"failed after {attempts} attempts: {message}"
        return Err(
            GitError(
                command=command,
                message=message,
                returncode=last.returncode,
                transient=is_transient(last),
                attempts=attempts,
            )
        )
