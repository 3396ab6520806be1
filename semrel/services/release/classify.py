"""Commit classification.

`classify` is total: every change lands in exactly one category.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from semrel.services.release.model import Category, Change, ClassifiedSet


# Bare leading type token: "fix:" matches, "fix(api):" does not.
TYPE_TOKEN_RE = re.compile(
    r"^(?P<type>feat|feature|fix|docs|style|refactor|perf|test|chore):\s*",
    re.IGNORECASE,
)

_BREAKING_MARKERS = ("breaking change", "breaking:")

_TOKEN_CATEGORIES: dict[str, Category] = {
    "feat": Category.FEATURE,
    "feature": Category.FEATURE,
    "fix": Category.FIX,
    "docs": Category.DOCS,
    "style": Category.STYLE,
    "refactor": Category.REFACTOR,
    "perf": Category.PERF,
    "test": Category.TEST,
    "chore": Category.CHORE,
}


def has_breaking_marker(change: Change) -> bool:
    text = f"{change.subject} {change.body}".lower()
    return any(marker in text for marker in _BREAKING_MARKERS)


def classify(change: Change) -> Category:
    """Category of a single change. A breaking marker beats any type token."""
    match (has_breaking_marker(change), TYPE_TOKEN_RE.match(change.subject)):
        case (True, _):
            return Category.BREAKING
        case (False, re.Match() as m):
            return _TOKEN_CATEGORIES[m.group("type").lower()]
        case _:
            return Category.OTHER


def classify_all(changes: Iterable[Change]) -> ClassifiedSet:
    return ClassifiedSet.build((classify(c), c) for c in changes)


def strip_type_token(subject: str) -> str:
    """Subject without its leading type token ("feat: add x" -> "add x")."""
    return TYPE_TOKEN_RE.sub("", subject, count=1)
