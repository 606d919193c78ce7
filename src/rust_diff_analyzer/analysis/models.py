"""Semantic unit, change, and analysis result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Visibility(str, Enum):
    PUBLIC = "public"
    MODULE_SCOPED = "module_scoped"
    PRIVATE = "private"


class SemanticUnitKind(str, Enum):
    FUNCTION = "function"
    TYPE_DEFINITION = "type_definition"
    INTERFACE_DECLARATION = "interface_declaration"
    IMPLEMENTATION_BLOCK = "implementation_block"
    MODULE = "module"
    BUILD_SCRIPT_ENTRY = "build_script_entry"


class CodeType(str, Enum):
    PRODUCTION = "production"
    TEST = "test"
    TEST_UTILITY = "test_utility"
    BENCHMARK = "benchmark"
    EXAMPLE = "example"
    BUILD_SCRIPT = "build_script"

    @property
    def is_production(self) -> bool:
        return self is CodeType.PRODUCTION

    @property
    def is_test_related(self) -> bool:
        return self in (CodeType.TEST, CodeType.TEST_UTILITY, CodeType.BENCHMARK)


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class LineSpan:
    """Inclusive, 1-indexed line range."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"invalid line span {self.start}..{self.end}")

    def __len__(self) -> int:
        return self.end - self.start + 1

    def contains(self, line: int) -> bool:
        return self.start <= line <= self.end

    def contains_span(self, other: LineSpan) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: LineSpan) -> bool:
        return self.start <= other.end and other.start <= self.end


@dataclass(frozen=True)
class CfgPredicate:
    """Parsed ``cfg(...)`` predicate.

    ``op`` is one of ``option`` (``test``, ``feature = "x"``), ``all``,
    ``any``, ``not``, or ``unknown`` for anything the walker could not read.
    """

    op: str
    name: str = ""
    value: Optional[str] = None
    args: Tuple["CfgPredicate", ...] = ()


@dataclass(frozen=True)
class Attribute:
    """An outer or inner attribute as written, e.g. ``tokio::test`` or ``cfg``."""

    path: str
    cfg: Optional[CfgPredicate] = None

    @property
    def name(self) -> str:
        """Last path segment: ``tokio::test`` → ``test``."""
        return self.path.rsplit("::", 1)[-1]


@dataclass(frozen=True)
class SemanticUnit:
    """A declaration with its line span and derived code type.

    ``kind`` is None only for the unidentified regions reported by the
    mapper (changed lines outside every known unit).
    """

    kind: Optional[SemanticUnitKind]
    name: str
    visibility: Visibility
    span: LineSpan
    code_type: CodeType

    @property
    def identity(self) -> Tuple[Optional[SemanticUnitKind], str, LineSpan]:
        return (self.kind, self.name, self.span)

    @property
    def is_identified(self) -> bool:
        return self.kind is not None


@dataclass(frozen=True)
class Change:
    """A unit touched by a diff, with the lines attributed to it."""

    file: str
    unit: SemanticUnit
    kind: ChangeKind
    added_lines: int = 0
    removed_lines: int = 0

    @property
    def total_lines(self) -> int:
        return self.added_lines + self.removed_lines


@dataclass
class FileAnalysis:
    """Per-file provenance of an analysis run."""

    path: str
    old_path: Optional[str] = None
    status: str = "modified"
    changes: int = 0
    skipped: Optional[str] = None  # 'binary', 'not_rust', 'ignored', 'no_source', 'parse_error'


@dataclass
class AnalysisResult:
    """Complete result of analysing one diff."""

    changes: List[Change] = field(default_factory=list)
    files: List[FileAnalysis] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def analyzed_files(self) -> List[FileAnalysis]:
        return [f for f in self.files if f.skipped is None]

    @property
    def skipped_files(self) -> List[FileAnalysis]:
        return [f for f in self.files if f.skipped is not None]

    def changes_for(self, path: str) -> List[Change]:
        return [c for c in self.changes if c.file == path]
