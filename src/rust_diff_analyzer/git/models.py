"""Data models for diff parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class LineType(str, Enum):
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    MODE_CHANGED = "mode_changed"


@dataclass(frozen=True, slots=True)
class HunkLine:
    """A single body line of a hunk with its resolved line numbers.

    Context lines carry both numbers, added lines only ``new_no`` and
    removed lines only ``old_no``.
    """

    line_type: LineType
    content: str
    old_no: Optional[int] = None
    new_no: Optional[int] = None

    @property
    def line_no(self) -> int:
        """Old-side number for removed lines, new-side number otherwise."""
        number = self.old_no if self.line_type == LineType.REMOVED else self.new_no
        if number is None:
            raise ValueError(f"{self.line_type.value} line has no line number")
        return number


@dataclass(frozen=True)
class Hunk:
    """One ``@@ -a,b +c,d @@`` block."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[HunkLine, ...] = ()
    section: str = ""  # text after the closing @@, usually the enclosing fn

    @property
    def added_count(self) -> int:
        return sum(1 for line in self.lines if line.line_type == LineType.ADDED)

    @property
    def removed_count(self) -> int:
        return sum(1 for line in self.lines if line.line_type == LineType.REMOVED)


@dataclass(frozen=True)
class FileDiff:
    """All hunks for one file of a diff.

    Binary entries never carry hunks. Paths are ``None`` where the diff
    names ``/dev/null``.
    """

    old_path: Optional[str]
    new_path: Optional[str]
    status: FileStatus = FileStatus.MODIFIED
    is_rename: bool = False
    is_binary: bool = False
    hunks: Tuple[Hunk, ...] = ()

    @property
    def path(self) -> str:
        """The path changes are attributed to (new path unless deleted)."""
        return self.new_path or self.old_path or ""

    @property
    def added_count(self) -> int:
        return sum(h.added_count for h in self.hunks)

    @property
    def removed_count(self) -> int:
        return sum(h.removed_count for h in self.hunks)
