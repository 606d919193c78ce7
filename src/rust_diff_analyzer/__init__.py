"""rust-diff-analyzer — classify and score the Rust code a diff touches."""

__version__ = "0.1.0"

from rust_diff_analyzer.analysis import (
    AnalysisResult,
    Change,
    ChangeKind,
    CodeType,
    FileAnalysis,
    LineSpan,
    ParseError,
    SemanticUnit,
    SemanticUnitKind,
    Visibility,
    analyze,
    classify,
    extract_semantic_units,
    map_changes,
)
from rust_diff_analyzer.config import Config, ConfigError, ConfigValidationError, load_config
from rust_diff_analyzer.git.diff_parser import DiffParseError, parse_diff
from rust_diff_analyzer.git.models import FileDiff, FileStatus, Hunk, HunkLine, LineType
from rust_diff_analyzer.scoring import LimitOutcome, LimitViolation, Summary, evaluate, summarize

__all__ = [
    "AnalysisResult",
    "Change",
    "ChangeKind",
    "CodeType",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DiffParseError",
    "FileAnalysis",
    "FileDiff",
    "FileStatus",
    "Hunk",
    "HunkLine",
    "LimitOutcome",
    "LimitViolation",
    "LineSpan",
    "LineType",
    "ParseError",
    "SemanticUnit",
    "SemanticUnitKind",
    "Summary",
    "Visibility",
    "__version__",
    "analyze",
    "classify",
    "evaluate",
    "extract_semantic_units",
    "load_config",
    "map_changes",
    "parse_diff",
    "summarize",
]
