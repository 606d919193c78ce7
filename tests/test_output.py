"""Tests for output reporters."""

import json

import yaml
from rich.console import Console

from rust_diff_analyzer.analysis.models import (
    AnalysisResult,
    Change,
    ChangeKind,
    CodeType,
    FileAnalysis,
    LineSpan,
    SemanticUnit,
    SemanticUnitKind,
    Visibility,
)
from rust_diff_analyzer.output import json_report, terminal, yaml_report
from rust_diff_analyzer.scoring.models import LimitOutcome, LimitViolation, Summary


def _make_result() -> AnalysisResult:
    """Build an AnalysisResult with sample data."""
    named = SemanticUnit(
        kind=SemanticUnitKind.FUNCTION,
        name="shout",
        visibility=Visibility.MODULE_SCOPED,
        span=LineSpan(13, 15),
        code_type=CodeType.PRODUCTION,
    )
    orphan = SemanticUnit(
        kind=None,
        name="",
        visibility=Visibility.PRIVATE,
        span=LineSpan(1, 1),
        code_type=CodeType.PRODUCTION,
    )
    return AnalysisResult(
        changes=[
            Change("src/lib.rs", orphan, ChangeKind.ADDED, 1, 0),
            Change("src/lib.rs", named, ChangeKind.ADDED, 3, 0),
        ],
        files=[
            FileAnalysis(path="src/lib.rs", changes=2),
            FileAnalysis(path="logo.png", status="added", skipped="binary"),
        ],
        errors=["failed to parse 'src/bad.rs' at 1:5: unexpected syntax"],
        duration_ms=4.2,
    )


def _summary() -> Summary:
    return Summary(
        counts={(CodeType.PRODUCTION, ChangeKind.ADDED): 2},
        weighted_score=12,
        prod_units=1,
        prod_lines_added=4,
        total_added=4,
    )


FAILED = LimitOutcome([LimitViolation("max_weighted_score", 12, 10)])


class TestJsonReport:
    def test_valid_json(self):
        data = json.loads(json_report.render(_make_result(), _summary(), FAILED))
        assert data["version"] == "1.0"
        assert data["passed"] is False
        assert data["analyzed_files"] == 1
        assert data["total_changes"] == 2
        assert data["violations"] == [{"limit": "max_weighted_score", "actual": 12, "maximum": 10}]
        assert data["skipped_files"] == [{"file": "logo.png", "reason": "binary"}]
        assert len(data["errors"]) == 1

    def test_summary_block(self):
        data = json_report.to_dict(_make_result(), _summary(), LimitOutcome())
        summary = data["summary"]
        assert summary["weighted_score"] == 12
        assert summary["prod_units"] == 1
        assert summary["changes_by_type"] == {
            "production": {"added": 2, "modified": 0, "removed": 0}
        }

    def test_change_details(self):
        data = json_report.to_dict(_make_result(), _summary(), LimitOutcome())
        orphan, named = data["changes"]
        assert orphan["unit"] is None
        assert named == {
            "file": "src/lib.rs",
            "kind": "added",
            "unit": "function",
            "name": "shout",
            "visibility": "module_scoped",
            "code_type": "production",
            "start_line": 13,
            "end_line": 15,
            "added": 3,
            "removed": 0,
        }

    def test_details_can_be_hidden(self):
        data = json_report.to_dict(_make_result(), _summary(), LimitOutcome(), show_details=False)
        assert "changes" not in data
        assert data["total_changes"] == 2


class TestYamlReport:
    def test_matches_json_document(self):
        result, summary = _make_result(), _summary()
        from_yaml = yaml.safe_load(yaml_report.render(result, summary, FAILED))
        assert from_yaml == json_report.to_dict(result, summary, FAILED)


class TestTerminalReport:
    def _render(self, result, outcome, **kwargs) -> str:
        console = Console(record=True, width=160, force_terminal=False)
        terminal.render(result, _summary(), outcome, console=console, **kwargs)
        return console.export_text()

    def test_table_and_verdict(self):
        text = self._render(_make_result(), FAILED)
        assert "shout" in text
        assert "(outside any unit)" in text
        assert "LIMITS EXCEEDED" in text
        assert "Weighted score: 12 > 10" in text
        assert "unexpected syntax" in text

    def test_passed(self):
        text = self._render(_make_result(), LimitOutcome())
        assert "PASSED" in text

    def test_no_changes(self):
        text = self._render(AnalysisResult(), LimitOutcome())
        assert "No Rust code changes" in text

    def test_details_hidden(self):
        text = self._render(_make_result(), LimitOutcome(), show_details=False)
        assert "shout" not in text
        assert "Weighted score" in text
