"""Tests for semrel.output.console module."""

from __future__ import annotations

import pytest

from semrel.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.ERROR) == "error"
        assert str(Style.DEFAULT) == "default"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "BOLD", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixed_helpers(self) -> None:
        console = MockConsole()
        console.success("released v1.0.0")
        console.error("git failed")
        console.warning("dirty tree")
        console.info("nothing to release")
        assert console.messages == [
            "OK released v1.0.0",
            "error: git failed",
            "warning: dirty tree",
            "info: nothing to release",
        ]
        assert [o.style for o in console.outputs] == [Style.SUCCESS, Style.ERROR, Style.WARNING, Style.INFO]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Next steps")
        console.newline()
        assert console.outputs == [OutputRecord("Next steps", Style.HEADER), OutputRecord("", Style.DEFAULT)]

    def test_text_property(self) -> None:
        console = MockConsole()
        console.print("line1")
        console.print("line2")
        assert console.text == "line1\nline2"

    def test_has_error_and_warning(self) -> None:
        console = MockConsole()
        assert console.has_error() is False
        assert console.has_warning() is False
        console.error("oops")
        console.warning("hmm")
        assert console.has_error() is True
        assert console.has_warning() is True

    def test_find(self) -> None:
        console = MockConsole()
        console.print("-> Tagging")
        console.print("  tagged v1.2.0")
        console.print("-> Done")
        assert [o.message for o in console.find("->")] == ["-> Tagging", "-> Done"]


class TestRichConsole:
    """Test RichConsole integration."""

    def test_commit_subjects_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("- fix [bold]parsing[/bold] of [x] (abc1234)")
        out = capsys.readouterr().out
        assert "[bold]parsing[/bold]" in out
        assert "[x]" in out

    def test_prefixes(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.warning("work tree has [2] changes")
        assert capsys.readouterr().out.strip() == "warning: work tree has [2] changes"

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(stderr=True)
        console.info("diagnostics")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "info: diagnostics" in captured.err


def test_mock_satisfies_protocol() -> None:
    def use_console(c: ConsoleProtocol) -> None:
        c.print("test")
        c.success("ok")
        c.error("err")
        c.warning("warn")
        c.info("info")
        c.header("hdr")
        c.newline()

    mock = MockConsole()
    use_console(mock)
    assert len(mock.outputs) == 7
