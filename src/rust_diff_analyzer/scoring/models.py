"""Summary and limit outcome models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from rust_diff_analyzer.analysis.models import ChangeKind, CodeType


@dataclass
class Summary:
    """Aggregate view of a Change list."""

    counts: Dict[Tuple[CodeType, ChangeKind], int] = field(default_factory=dict)
    weighted_score: int = 0
    prod_units: int = 0  # identified PRODUCTION units added or modified
    prod_lines_added: int = 0
    prod_lines_removed: int = 0
    total_added: int = 0
    total_removed: int = 0

    def count(self, code_type: CodeType, kind: ChangeKind) -> int:
        return self.counts.get((code_type, kind), 0)

    @property
    def prod_lines(self) -> int:
        return self.prod_lines_added + self.prod_lines_removed

    @property
    def total_changes(self) -> int:
        return sum(self.counts.values())


@dataclass(frozen=True)
class LimitViolation:
    limit: str  # 'max_prod_units' | 'max_weighted_score' | 'max_prod_lines'
    actual: int
    maximum: int


@dataclass
class LimitOutcome:
    violations: List[LimitViolation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    def exceeded(self, limit: str) -> bool:
        return any(v.limit == limit for v in self.violations)

    @property
    def prod_units_exceeded(self) -> bool:
        return self.exceeded("max_prod_units")

    @property
    def score_exceeded(self) -> bool:
        return self.exceeded("max_weighted_score")

    @property
    def prod_lines_exceeded(self) -> bool:
        return self.exceeded("max_prod_lines")
