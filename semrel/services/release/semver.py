"""Version parsing and bump resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass

from semrel.core.result import Err, Ok, Result
from semrel.services.release.errors import ReleaseError
from semrel.services.release.model import BumpLevel, Category, ClassifiedSet


TAG_PREFIX = "v"

# Strict ASCII MAJOR.MINOR.PATCH; anything placed in a tag name or commit message
# must match this first.
VERSION_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")
_TAG_RE = re.compile(r"^v([0-9]+)\.([0-9]+)\.([0-9]+)$")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self) -> str:
        return f"{TAG_PREFIX}{self}"

    def bump(self, level: BumpLevel) -> Version:
        match level:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump level: {level}")


def parse_version(text: str) -> Result[Version, ReleaseError]:
    """Parse a manifest version string.

    Only a plain numeric triple is accepted. "1.2", "1.2.x" and "1.2.3-rc.1"
    are rejected rather than coerced.
    """
    m = VERSION_RE.match(text.strip())
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"invalid version format: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH (e.g. 1.0.0)",
            )
        )
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def parse_tag(tag: str) -> Version | None:
    """Parse a release tag (vMAJOR.MINOR.PATCH); None for anything else."""
    m = _TAG_RE.match(tag)
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def checked_version_str(version: Version) -> Result[str, ReleaseError]:
    """Render a version for use in a tag or commit message, re-validating it."""
    text = str(version)
    if VERSION_RE.match(text) is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"refusing to use malformed version: {text!r}",
            )
        )
    return Ok(text)


def resolve_bump(classified: ClassifiedSet) -> BumpLevel:
    """Decide the bump: breaking > feature > anything > nothing."""
    if classified.count(Category.BREAKING):
        return "major"
    if classified.count(Category.FEATURE):
        return "minor"
    if not classified.is_empty:
        return "patch"
    return "none"
