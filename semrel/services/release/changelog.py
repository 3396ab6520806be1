"""Changelog rendering and insertion.

A changelog is a header followed by release entries, newest first:

    # Changelog
    ...
    ---

    ## [1.3.0] - 2026-10-19

    ### Features

    - add widget (abc1234)

New entries are inserted above the newest one; the text of existing entries
is never touched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.services.release.classify import strip_type_token
from semrel.services.release.errors import ReleaseError
from semrel.services.release.model import Category, Change, ClassifiedSet
from semrel.services.release.semver import Version


DEFAULT_HEADER = (
    "# Changelog\n"
    "\n"
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "---\n"
)

# Heading and member categories, in output order.
CHANGELOG_SECTIONS: tuple[tuple[str, tuple[Category, ...]], ...] = (
    ("BREAKING CHANGES", (Category.BREAKING,)),
    ("Features", (Category.FEATURE,)),
    ("Bug Fixes", (Category.FIX,)),
    ("Performance Improvements", (Category.PERF,)),
    ("Code Refactoring", (Category.REFACTOR,)),
    ("Documentation", (Category.DOCS,)),
    ("Other Changes", (Category.STYLE, Category.TEST, Category.CHORE)),
    ("Other", (Category.OTHER,)),
)

_ENTRY_RE = re.compile(r"(?m)^## \[(?P<version>[^\]]+)\](?: - (?P<date>\S+))?[^\n]*$")
_SEPARATOR_RE = re.compile(r"(?m)^---[ \t]*\r?$")


def format_change(change: Change, *, commit_url: str | None = None) -> str:
    """One bullet line: subject without type token, then the short id."""
    subject = strip_type_token(change.subject)
    if commit_url:
        url = commit_url.replace("{sha}", change.id)
        return f"- {subject} ([{change.short_id}]({url}))"
    return f"- {subject} ({change.short_id})"


def render_sections(
    classified: ClassifiedSet,
    sections: tuple[tuple[str, tuple[Category, ...]], ...],
    *,
    heading: str,
    commit_url: str | None = None,
) -> list[str]:
    """Lines for every non-empty section, each followed by a blank line."""
    lines: list[str] = []
    for title, categories in sections:
        changes = classified.merged(*categories)
        if not changes:
            continue
        lines.append(f"{heading} {title}")
        lines.append("")
        lines.extend(format_change(c, commit_url=commit_url) for c in changes)
        lines.append("")
    return lines


def render_entry(
    *,
    version: Version,
    day: date,
    classified: ClassifiedSet,
    commit_url: str | None = None,
) -> str:
    lines = [f"## [{version}] - {day.isoformat()}", ""]
    lines.extend(render_sections(classified, CHANGELOG_SECTIONS, heading="###", commit_url=commit_url))
    return "\n".join(lines).rstrip("\n") + "\n"


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    """A release entry parsed back from changelog text."""

    version: str
    date: str | None
    sections: tuple[tuple[str, tuple[str, ...]], ...]

    def section(self, title: str) -> tuple[str, ...]:
        for t, lines in self.sections:
            if t == title:
                return lines
        return ()

    @property
    def titles(self) -> tuple[str, ...]:
        return tuple(t for t, _ in self.sections)


def parse_sections(text: str) -> tuple[tuple[str, tuple[str, ...]], ...]:
    """`### Title` headings with their bullet lines, in order."""
    sections: list[tuple[str, list[str]]] = []
    for line in text.splitlines():
        if line.startswith("### "):
            sections.append((line[4:].strip(), []))
        elif line.startswith("- ") and sections:
            sections[-1][1].append(line)
    return tuple((title, tuple(lines)) for title, lines in sections)


@dataclass(frozen=True, slots=True)
class ChangelogDocument:
    """Changelog text, or the default header for a file that does not exist yet."""

    text: str

    @classmethod
    def load(cls, path: Path) -> Result[ChangelogDocument, ReleaseError]:
        try:
            return Ok(cls(text=path.read_bytes().decode("utf-8")))
        except FileNotFoundError:
            return Ok(cls(text=DEFAULT_HEADER))
        except UnicodeDecodeError as e:
            return Err(
                ReleaseError(
                    kind="invalid_changelog",
                    message=f"{path.name} is not valid UTF-8: {e}",
                    hint=str(path),
                )
            )
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"failed to read {path.name}: {e}", hint=str(path)))

    def entries(self) -> tuple[ChangelogEntry, ...]:
        """Release entries, newest first."""
        matches = list(_ENTRY_RE.finditer(self.text))
        out: list[ChangelogEntry] = []
        for i, m in enumerate(matches):
            end = matches[i + 1].start() if i + 1 < len(matches) else len(self.text)
            out.append(
                ChangelogEntry(
                    version=m.group("version"),
                    date=m.group("date"),
                    sections=parse_sections(self.text[m.end() : end]),
                )
            )
        return tuple(out)

    def has_version(self, version: Version) -> bool:
        return any(e.version == str(version) for e in self.entries())

    def with_entry(self, entry: str) -> str:
        """Text with `entry` inserted as the newest release.

        Insert above the first `## [` entry; failing that, below the `---`
        header separator; failing that, at the end.
        """
        entry = entry.strip("\n")
        text = self.text

        first = _ENTRY_RE.search(text)
        if first is not None:
            at = first.start()
            return text[:at] + entry + "\n\n" + text[at:]

        sep = _SEPARATOR_RE.search(text)
        if sep is not None:
            before = text[: sep.end()]
            after = text[sep.end() :].lstrip("\n")
            tail = f"\n{after}" if after else ""
            return f"{before}\n\n{entry}\n{tail}"

        if not text.strip():
            return entry + "\n"
        return text.rstrip("\n") + "\n\n" + entry + "\n"
