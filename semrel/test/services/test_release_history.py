from __future__ import annotations

from typing import TYPE_CHECKING

from semrel.core.result import Err, Ok
from semrel.services.release.history import find_previous_tag, parse_log, read_history
from semrel.services.release.model import Change

if TYPE_CHECKING:
    from semrel.test.services.conftest import FakeVcs


SHA_A = "a" * 40
SHA_B = "b" * 40


def test_parse_log_keeps_multiline_bodies() -> None:
    output = (
        f"{SHA_A}\x1ffeat: add | pipe\x1fline one\nline two\x1e\n"
        f"{SHA_B}\x1ffix: null check\x1f\x1e\n"
    )

    changes = parse_log(output)

    assert changes == (
        Change(id=SHA_A, subject="feat: add | pipe", body="line one\nline two"),
        Change(id=SHA_B, subject="fix: null check", body=""),
    )


def test_parse_log_drops_bad_records() -> None:
    output = (
        f"not-a-sha\x1ffeat: x\x1f\x1e\n"
        f"{SHA_A}\x1f   \x1f\x1e\n"
        f"abc12\x1ffix: too short\x1f\x1e\n"
        f"{SHA_B}\x1fchore: kept\x1f\x1e"
    )
    assert [c.subject for c in parse_log(output)] == ["chore: kept"]


def test_parse_log_empty() -> None:
    assert parse_log("") == ()


def test_previous_tag_skips_non_release_tags(vcs: FakeVcs) -> None:
    vcs.tags = {"v1.0.0": "x", "v1.1.0": "y", "v2.0.0-rc.1": "z"}
    assert find_previous_tag(vcs) == Ok("v1.1.0")


def test_previous_tag_none(vcs: FakeVcs) -> None:
    assert find_previous_tag(vcs) == Ok(None)


def test_merges_win_over_plain_commits(vcs: FakeVcs) -> None:
    vcs.changes = [Change(id=SHA_A, subject="fix: direct push")]
    vcs.merges = [Change(id=SHA_B, subject="feat: merged widget")]

    result = read_history(vcs)

    assert isinstance(result, Ok)
    assert result.value.merges_only is True
    assert [c.subject for c in result.value.changes] == ["feat: merged widget"]


def test_linear_history_uses_every_commit(vcs: FakeVcs) -> None:
    vcs.tags = {"v1.0.0": "x"}
    vcs.changes = [Change(id=SHA_A, subject="fix: one"), Change(id=SHA_B, subject="chore: two")]

    result = read_history(vcs)

    assert isinstance(result, Ok)
    assert result.value.previous_tag == "v1.0.0"
    assert result.value.merges_only is False
    assert len(result.value.changes) == 2


def test_repository_without_commits_is_empty_history(vcs: FakeVcs) -> None:
    vcs.commits = []

    result = read_history(vcs)

    assert isinstance(result, Ok)
    assert result.value.changes == ()
    assert "log" not in vcs.calls


def test_git_failure_is_git_failed(vcs: FakeVcs) -> None:
    vcs.fail("log", "fatal: bad revision")

    result = read_history(vcs)

    assert isinstance(result, Err)
    assert result.error.kind == "git_failed"
    assert "bad revision" in result.error.message
