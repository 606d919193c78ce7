"""Scoring — summary aggregation and limit evaluation."""

from rust_diff_analyzer.scoring.evaluator import evaluate, summarize
from rust_diff_analyzer.scoring.models import LimitOutcome, LimitViolation, Summary

__all__ = ["LimitOutcome", "LimitViolation", "Summary", "evaluate", "summarize"]
