"""Weighted scoring and limit evaluation."""

from __future__ import annotations

from typing import Iterable, Mapping

from rust_diff_analyzer.analysis.models import Change, ChangeKind, CodeType
from rust_diff_analyzer.config.schema import LimitsConfig
from rust_diff_analyzer.scoring.models import LimitOutcome, LimitViolation, Summary

_COUNTED_KINDS = (ChangeKind.ADDED, ChangeKind.MODIFIED)


def summarize(changes: Iterable[Change], weights: Mapping[CodeType, int]) -> Summary:
    """Aggregate *changes* into a Summary.

    The result does not depend on the order of *changes*. A CodeType absent
    from *weights* contributes nothing to the score.
    """
    summary = Summary()
    for change in changes:
        code_type = change.unit.code_type
        key = (code_type, change.kind)
        summary.counts[key] = summary.counts.get(key, 0) + 1
        summary.weighted_score += weights.get(code_type, 0) * change.total_lines
        summary.total_added += change.added_lines
        summary.total_removed += change.removed_lines

        if code_type.is_production:
            summary.prod_lines_added += change.added_lines
            summary.prod_lines_removed += change.removed_lines
            if change.unit.is_identified and change.kind in _COUNTED_KINDS:
                summary.prod_units += 1
    return summary


def evaluate(summary: Summary, limits: LimitsConfig) -> LimitOutcome:
    """Check every configured limit independently. Never raises."""
    outcome = LimitOutcome()
    checks = [
        ("max_prod_units", summary.prod_units, limits.max_prod_units),
        ("max_weighted_score", summary.weighted_score, limits.max_weighted_score),
    ]
    if limits.max_prod_lines is not None:
        checks.append(("max_prod_lines", summary.prod_lines, limits.max_prod_lines))

    for name, actual, maximum in checks:
        if actual > maximum:
            outcome.violations.append(LimitViolation(name, actual, maximum))
    return outcome
