from __future__ import annotations

import pytest

from semrel.core.errors import ErrorCode
from semrel.output.console import MockConsole
from semrel.output.errors import (
    print_release_error,
    print_release_failure,
    print_rollback_report,
    recovery_suggestions,
    release_error_exit_code,
)
from semrel.services.release.errors import ReleaseError, ReleaseErrorKind
from semrel.services.release.transaction import (
    ReleaseFailure,
    RollbackReport,
    RollbackStep,
    TxState,
)


@pytest.mark.parametrize(
    "kind, code",
    [
        ("invalid_version", ErrorCode.USER_ERROR),
        ("invalid_manifest", ErrorCode.USER_ERROR),
        ("invalid_changelog", ErrorCode.USER_ERROR),
        ("invalid_config", ErrorCode.USER_ERROR),
        ("tag_exists", ErrorCode.USER_ERROR),
        ("dirty_worktree", ErrorCode.USER_ERROR),
        ("not_a_repo", ErrorCode.ENV_ERROR),
        ("git_failed", ErrorCode.TOOL_ERROR),
        ("io_failed", ErrorCode.IO_ERROR),
    ],
)
def test_exit_codes(kind: ReleaseErrorKind, code: ErrorCode) -> None:
    assert release_error_exit_code(ReleaseError(kind=kind, message="x")) == int(code)


def test_every_kind_has_suggestions() -> None:
    kinds: list[ReleaseErrorKind] = [
        "not_a_repo",
        "dirty_worktree",
        "invalid_config",
        "invalid_version",
        "invalid_manifest",
        "invalid_changelog",
        "tag_exists",
        "git_failed",
        "io_failed",
    ]
    for kind in kinds:
        assert recovery_suggestions(ReleaseError(kind=kind, message="x"))


def test_print_release_error() -> None:
    console = MockConsole()

    print_release_error(ReleaseError(kind="git_failed", message="commit failed", hint="retry later"), console)

    assert console.messages[0] == "error: commit failed"
    assert console.messages[1] == "hint: retry later"
    assert console.find("user.name and user.email")


def test_clean_rollback_report() -> None:
    console = MockConsole()
    report = RollbackReport(steps=(RollbackStep(name="restore package.json", ok=True),))

    print_rollback_report(report, console)

    assert console.messages == ["OK rolled back (1 step(s) undone)"]


def test_failed_rollback_lists_manual_commands() -> None:
    console = MockConsole()
    report = RollbackReport(
        steps=(
            RollbackStep(name="delete tag v1.3.0", ok=False, detail="permission denied", manual="git tag -d v1.3.0"),
            RollbackStep(name="restore package.json", ok=True),
        )
    )

    print_rollback_report(report, console)

    assert console.has_error()
    assert "  delete tag v1.3.0: permission denied" in console.messages
    assert "    $ git tag -d v1.3.0" in console.messages
    assert not console.find("restore package.json")


def test_empty_report_prints_nothing() -> None:
    console = MockConsole()
    print_release_failure(
        ReleaseFailure(error=ReleaseError(kind="tag_exists", message="tag already exists: v1.0.0"), failed_in=TxState.COMPUTING),
        console,
    )
    assert console.messages[0] == "error: tag already exists: v1.0.0"
    assert not console.find("rolled back")
