"""YAML reporter — same document as the JSON report."""

from __future__ import annotations

import yaml

from rust_diff_analyzer.analysis.models import AnalysisResult
from rust_diff_analyzer.output.json_report import to_dict
from rust_diff_analyzer.scoring.models import LimitOutcome, Summary


def render(
    result: AnalysisResult,
    summary: Summary,
    outcome: LimitOutcome,
    *,
    show_details: bool = True,
) -> str:
    data = to_dict(result, summary, outcome, show_details=show_details)
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
