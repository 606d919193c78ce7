"""JSON reporter for CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from rust_diff_analyzer.analysis.models import AnalysisResult, ChangeKind, CodeType
from rust_diff_analyzer.scoring.models import LimitOutcome, Summary

REPORT_VERSION = "1.0"


def _summary_dict(summary: Summary) -> Dict[str, Any]:
    by_type: Dict[str, Dict[str, int]] = {}
    for code_type in CodeType:
        counts = {kind.value: summary.count(code_type, kind) for kind in ChangeKind}
        if any(counts.values()):
            by_type[code_type.value] = counts
    return {
        "weighted_score": summary.weighted_score,
        "prod_units": summary.prod_units,
        "prod_lines_added": summary.prod_lines_added,
        "prod_lines_removed": summary.prod_lines_removed,
        "total_added": summary.total_added,
        "total_removed": summary.total_removed,
        "changes_by_type": by_type,
    }


def to_dict(
    result: AnalysisResult,
    summary: Summary,
    outcome: LimitOutcome,
    *,
    show_details: bool = True,
) -> Dict[str, Any]:
    """Convert an analysis run to a JSON-serialisable dict."""
    data: Dict[str, Any] = {
        "version": REPORT_VERSION,
        "passed": outcome.passed,
        "analyzed_files": len(result.analyzed_files),
        "total_changes": len(result.changes),
        "summary": _summary_dict(summary),
        "violations": [
            {"limit": v.limit, "actual": v.actual, "maximum": v.maximum}
            for v in outcome.violations
        ],
        "skipped_files": [
            {"file": f.path, "reason": f.skipped} for f in result.skipped_files
        ],
        "errors": list(result.errors),
        "duration_ms": result.duration_ms,
    }

    if show_details:
        changes_list: List[Dict[str, Any]] = []
        for c in result.changes:
            unit = c.unit
            changes_list.append({
                "file": c.file,
                "kind": c.kind.value,
                "unit": unit.kind.value if unit.kind is not None else None,
                "name": unit.name,
                "visibility": unit.visibility.value,
                "code_type": unit.code_type.value,
                "start_line": unit.span.start,
                "end_line": unit.span.end,
                "added": c.added_lines,
                "removed": c.removed_lines,
            })
        data["changes"] = changes_list

    return data


def render(
    result: AnalysisResult,
    summary: Summary,
    outcome: LimitOutcome,
    *,
    show_details: bool = True,
) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result, summary, outcome, show_details=show_details), indent=2)
