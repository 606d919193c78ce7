"""Git interface layer — adapter, diff parsing, models."""

from rust_diff_analyzer.git.adapter import (
    GitError,
    get_range_diff,
    get_repo_root,
    get_staged_diff,
    has_revision,
    read_file_at,
)
from rust_diff_analyzer.git.diff_parser import DiffParseError, DiffParser, parse_diff
from rust_diff_analyzer.git.models import FileDiff, FileStatus, Hunk, HunkLine, LineType

__all__ = [
    "DiffParseError",
    "DiffParser",
    "FileDiff",
    "FileStatus",
    "GitError",
    "Hunk",
    "HunkLine",
    "LineType",
    "get_range_diff",
    "get_repo_root",
    "get_staged_diff",
    "has_revision",
    "parse_diff",
    "read_file_at",
]
