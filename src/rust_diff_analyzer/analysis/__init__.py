"""Analysis — extraction, classification, mapping, and the engine."""

from rust_diff_analyzer.analysis.classifier import classify
from rust_diff_analyzer.analysis.engine import analyze
from rust_diff_analyzer.analysis.extractor import ParseError, extract_semantic_units
from rust_diff_analyzer.analysis.mapper import map_changes
from rust_diff_analyzer.analysis.models import (
    AnalysisResult,
    Attribute,
    CfgPredicate,
    Change,
    ChangeKind,
    CodeType,
    FileAnalysis,
    LineSpan,
    SemanticUnit,
    SemanticUnitKind,
    Visibility,
)

__all__ = [
    "AnalysisResult",
    "Attribute",
    "CfgPredicate",
    "Change",
    "ChangeKind",
    "CodeType",
    "FileAnalysis",
    "LineSpan",
    "ParseError",
    "SemanticUnit",
    "SemanticUnitKind",
    "Visibility",
    "analyze",
    "classify",
    "extract_semantic_units",
    "map_changes",
]
