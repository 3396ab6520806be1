"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semrel.core.errors import ErrorCode
from semrel.output.console import Style
from semrel.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from semrel.output.console import ConsoleProtocol
    from semrel.services.release.transaction import ReleaseFailure, RollbackReport

__all__ = [
    "print_release_error",
    "print_release_failure",
    "print_rollback_report",
    "release_error_exit_code",
    "recovery_suggestions",
]


def recovery_suggestions(error: ReleaseError) -> tuple[str, ...]:
    """Things worth checking before retrying, most likely first."""
    match error.kind:
        case "not_a_repo":
            return ("Run semrel inside a git work tree, or pass --repo.",)
        case "dirty_worktree":
            return ("Commit or stash local changes.",)
        case "invalid_config":
            return ("Fix the [tool.semrel] table or semrel.toml.",)
        case "invalid_version" | "invalid_manifest":
            return (
                "Make sure the manifest holds a MAJOR.MINOR.PATCH version.",
                "Make sure the manifest version matches the latest release tag.",
            )
        case "invalid_changelog":
            return ("Check the changelog for a stale or hand-written entry.",)
        case "tag_exists":
            return ("List tags with `git tag -l 'v*'` and remove the stale one.",)
        case "git_failed":
            return (
                "Check that git is configured (user.name and user.email).",
                "Check that no other git process holds the repository lock.",
            )
        case "io_failed":
            return ("Check write permissions on the manifest, changelog and notes files.",)


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error, its hint and what to check next."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    for suggestion in recovery_suggestions(error):
        console.print(f"  - {suggestion}", Style.DIM)


def print_rollback_report(report: RollbackReport, console: ConsoleProtocol) -> None:
    if not report.steps:
        return

    if report.clean:
        console.success(f"rolled back ({len(report.steps)} step(s) undone)")
        return

    console.error("rollback incomplete; finish it by hand:")
    for step in report.failed:
        console.print(f"  {step.name}: {step.detail}", Style.WARNING)
        if step.manual:
            console.print(f"    $ {step.manual}", Style.BOLD)


def print_release_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    print_release_error(failure.error, console)
    print_rollback_report(failure.rollback, console)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    if error.is_validation:
        return int(ErrorCode.USER_ERROR)
    match error.kind:
        case "not_a_repo":
            return int(ErrorCode.ENV_ERROR)
        case "git_failed":
            return int(ErrorCode.TOOL_ERROR)
        case "io_failed":
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.USER_ERROR)
