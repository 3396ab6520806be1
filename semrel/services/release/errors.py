from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ReleaseErrorKind = Literal[
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

# Kinds that describe bad input rather than a failing tool; never retried.
VALIDATION_KINDS: frozenset[ReleaseErrorKind] = frozenset(
    {
        "dirty_worktree",
        "invalid_config",
        "invalid_version",
        "invalid_manifest",
        "invalid_changelog",
        "tag_exists",
    }
)


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def is_validation(self) -> bool:
        return self.kind in VALIDATION_KINDS

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
