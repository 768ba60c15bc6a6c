"""Version-control access: change sets as DiffFile records."""

from .git_diff import (
    GitDiffAdapter,
    build_diff_files,
    parse_name_status,
    rank_contributors,
    split_rename_path,
)
from .models import DiffFile, FileStatus

__all__ = [
    "DiffFile",
    "FileStatus",
    "GitDiffAdapter",
    "build_diff_files",
    "parse_name_status",
    "rank_contributors",
    "split_rename_path",
]
