"""Data models for version-control diff records."""

from dataclasses import dataclass
from typing import Literal, Optional

FileStatus = Literal["added", "modified", "deleted", "renamed"]


@dataclass
class DiffFile:
    """One file touched by a change set."""

    path: str
    status: FileStatus = "modified"
    additions: int = 0
    deletions: int = 0
    hunks: int = 1  # numstat does not report hunks; 1 is the approximation
    binary: bool = False
    old_path: Optional[str] = None  # set for renames

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions
