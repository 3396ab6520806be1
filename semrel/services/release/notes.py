from __future__ import annotations

from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.platform.files import atomic_write_text
from semrel.services.release.changelog import render_sections
from semrel.services.release.errors import ReleaseError
from semrel.services.release.model import Category, ClassifiedSet


# Release notes carry only user-facing changes; docs/style/test/chore/other
# stay in the changelog.
NOTES_SECTIONS: tuple[tuple[str, tuple[Category, ...]], ...] = (
    ("BREAKING CHANGES", (Category.BREAKING,)),
    ("Features", (Category.FEATURE,)),
    ("Bug Fixes", (Category.FIX,)),
    ("Improvements", (Category.PERF, Category.REFACTOR)),
)


def render_notes(classified: ClassifiedSet, *, commit_url: str | None = None) -> str:
    """Markdown notes for a release; empty string when nothing qualifies."""
    lines = render_sections(classified, NOTES_SECTIONS, heading="##", commit_url=commit_url)
    text = "\n".join(lines).strip("\n")
    return text + "\n" if text else ""


def write_notes(*, path: Path, notes: str) -> Result[Path, ReleaseError]:
    try:
        atomic_write_text(path, notes)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_failed",
                message=f"failed to write release notes: {e}",
                hint=str(path),
            )
        )
    return Ok(path)
