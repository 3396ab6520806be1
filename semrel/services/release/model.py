from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Literal


BumpLevel = Literal["major", "minor", "patch", "none"]

SHORT_ID_LENGTH = 7


class Category(Enum):
    """Kind of change, one per commit."""

    BREAKING = "breaking"
    FEATURE = "feature"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    CHORE = "chore"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Change:
    """A commit as read from history."""

    id: str
    subject: str
    body: str = ""

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_ID_LENGTH]


@dataclass(frozen=True, slots=True)
class ClassifiedSet:
    """Changes grouped by category, history order kept within each group.

    Every category is present (possibly empty), in Category declaration order.
    """

    groups: tuple[tuple[Category, tuple[Change, ...]], ...]

    @classmethod
    def build(cls, pairs: Iterable[tuple[Category, Change]]) -> ClassifiedSet:
        buckets: dict[Category, list[Change]] = {c: [] for c in Category}
        for category, change in pairs:
            buckets[category].append(change)
        return cls(groups=tuple((c, tuple(buckets[c])) for c in Category))

    def get(self, category: Category) -> tuple[Change, ...]:
        for c, changes in self.groups:
            if c is category:
                return changes
        return ()

    def merged(self, *categories: Category) -> tuple[Change, ...]:
        """Concatenate several groups, in the order given."""
        out: list[Change] = []
        for c in categories:
            out.extend(self.get(c))
        return tuple(out)

    def count(self, category: Category) -> int:
        return len(self.get(category))

    def non_empty(self) -> Iterator[Category]:
        return (c for c, changes in self.groups if changes)

    @property
    def total(self) -> int:
        return sum(len(changes) for _, changes in self.groups)

    @property
    def is_empty(self) -> bool:
        return self.total == 0
