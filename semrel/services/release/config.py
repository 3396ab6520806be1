from __future__ import annotations

import re


RELEASE_COMMIT_PREFIX = "chore(release): "
TAG_MESSAGE_PREFIX = "Release "

_RELEASE_COMMIT_RE = re.compile(r"^chore\(release\): (\d+\.\d+\.\d+)$")


def release_commit_message(version: str) -> str:
    return f"{RELEASE_COMMIT_PREFIX}{version}"


def tag_message(tag: str) -> str:
    return f"{TAG_MESSAGE_PREFIX}{tag}"


def is_release_commit(subject: str, *, version: str) -> bool:
    """True if subject is exactly the release commit for `version`."""
    m = _RELEASE_COMMIT_RE.match(subject.strip())
    return m is not None and m.group(1) == version
