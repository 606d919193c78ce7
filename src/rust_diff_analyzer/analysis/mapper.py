"""Correlate diff hunks with semantic unit spans.

Every added and removed line is attributed to exactly one Change:

* an added line goes to the innermost unit containing its new-side number;
* with old units supplied, a removed line goes to the innermost old unit
  containing its old-side number. It is credited to that unit's new-side
  counterpart (same kind and name) when one exists, otherwise the old unit
  is reported REMOVED;
* without old units, the i-th removed line of a change block (a run of
  non-context lines) is positioned at the i-th added line (the last one
  once they run out), and a pure deletion goes to the innermost unit
  surrounding the deletion point;
* whatever is left forms one unidentified Change per change block.

Because nothing is counted twice, the added (removed) counts of the
Changes produced from one hunk sum to that hunk's added (removed) count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from rust_diff_analyzer.analysis.classifier import classify, module_path_for
from rust_diff_analyzer.analysis.models import (
    Change,
    ChangeKind,
    LineSpan,
    SemanticUnit,
    Visibility,
)
from rust_diff_analyzer.config.schema import ClassificationConfig
from rust_diff_analyzer.git.models import FileDiff, Hunk, HunkLine, LineType


@dataclass
class _Tally:
    unit: SemanticUnit
    added: int = 0
    removed: int = 0


@dataclass
class _Block:
    """A maximal run of removed/added lines between context lines."""

    added: List[HunkLine]
    removed: List[HunkLine]
    anchor: int  # new-side line number following the block's removed lines

    def position(self, i: int) -> int:
        """New-side line the *i*-th removed line is taken to sit at."""
        if self.added:
            return self.added[min(i, len(self.added) - 1)].line_no
        return self.anchor


def _change_blocks(hunk: Hunk) -> Iterator[_Block]:
    next_new = hunk.new_start if hunk.new_count > 0 else hunk.new_start + 1
    added: List[HunkLine] = []
    removed: List[HunkLine] = []
    anchor = next_new

    for line in hunk.lines:
        if line.line_type == LineType.CONTEXT:
            if added or removed:
                yield _Block(added, removed, anchor)
                added, removed = [], []
            next_new = line.line_no + 1
            anchor = next_new
            continue
        if not added and not removed:
            anchor = next_new
        if line.line_type == LineType.ADDED:
            added.append(line)
            next_new = line.line_no + 1
        else:
            removed.append(line)

    if added or removed:
        yield _Block(added, removed, anchor)


def _innermost(units: Sequence[SemanticUnit], line: int) -> Optional[int]:
    """Index of the smallest unit whose span contains *line*."""
    best: Optional[int] = None
    for idx, unit in enumerate(units):
        if unit.span.contains(line) and (
            best is None or len(unit.span) <= len(units[best].span)
        ):
            best = idx
    return best


def _surrounding(units: Sequence[SemanticUnit], anchor: int) -> Optional[int]:
    """Index of the smallest unit covering lines ``anchor - 1`` and ``anchor``."""
    best: Optional[int] = None
    for idx, unit in enumerate(units):
        if unit.span.start < anchor <= unit.span.end and (
            best is None or len(unit.span) <= len(units[best].span)
        ):
            best = idx
    return best


def _counterpart(units: Sequence[SemanticUnit], old: SemanticUnit, position: int) -> Optional[int]:
    """Index of the new unit that *old* became, or None if it is gone.

    Candidates share kind and name with *old*. One covering *position*
    wins (smallest first); otherwise the one starting nearest to *old*.
    """
    candidates = [
        idx for idx, unit in enumerate(units) if unit.kind == old.kind and unit.name == old.name
    ]
    if not candidates:
        return None
    covering = [idx for idx in candidates if units[idx].span.start <= position <= units[idx].span.end]
    if covering:
        return min(covering, key=lambda idx: len(units[idx].span))
    return min(candidates, key=lambda idx: abs(units[idx].span.start - old.span.start))


def _unidentified(file_path: str, span: LineSpan, config: ClassificationConfig) -> SemanticUnit:
    return SemanticUnit(
        kind=None,
        name="",
        visibility=Visibility.PRIVATE,
        span=span,
        code_type=classify((), (), module_path_for(file_path), file_path, config),
    )


def _span_of(numbers: Sequence[int]) -> LineSpan:
    return LineSpan(max(min(numbers), 1), max(max(numbers), 1))


def map_changes(
    file_diff: FileDiff,
    units: Sequence[SemanticUnit],
    old_units: Optional[Sequence[SemanticUnit]] = None,
    config: Optional[ClassificationConfig] = None,
) -> List[Change]:
    """Map one file's hunks onto its units. Ordered by span start.

    *old_units* are the units of the pre-change source. Passing them (an
    empty list included) switches removed-line attribution to old-side
    spans, which is what lets a replaced unit show up as REMOVED.
    """
    if file_diff.is_binary or not file_diff.hunks:
        return []

    config = config or ClassificationConfig()
    path = file_diff.path
    tallies: Dict[int, _Tally] = {}
    old_tallies: Dict[int, _Tally] = {}
    unidentified: List[Tuple[_Tally, ChangeKind]] = []
    added_new_lines: Set[int] = set()

    def tally(idx: int) -> _Tally:
        if idx not in tallies:
            tallies[idx] = _Tally(units[idx])
        return tallies[idx]

    def old_tally(idx: int, old: Sequence[SemanticUnit]) -> _Tally:
        if idx not in old_tallies:
            old_tallies[idx] = _Tally(old[idx])
        return old_tallies[idx]

    for hunk in file_diff.hunks:
        for block in _change_blocks(hunk):
            stray_added: List[int] = []
            stray_removed: List[int] = []

            for line in block.added:
                added_new_lines.add(line.line_no)
                idx = _innermost(units, line.line_no)
                if idx is None:
                    stray_added.append(line.line_no)
                else:
                    tally(idx).added += 1

            for i, line in enumerate(block.removed):
                if old_units is not None:
                    old_idx = _innermost(old_units, line.line_no)
                    if old_idx is not None:
                        idx = _counterpart(units, old_units[old_idx], block.position(i))
                        if idx is None:
                            old_tally(old_idx, old_units).removed += 1
                        else:
                            tally(idx).removed += 1
                        continue
                else:
                    if block.added:
                        idx = _innermost(units, block.position(i))
                    else:
                        idx = _surrounding(units, block.anchor)
                    if idx is not None:
                        tally(idx).removed += 1
                        continue
                stray_removed.append(line.line_no)

            if stray_added or stray_removed:
                if stray_added and stray_removed:
                    kind = ChangeKind.MODIFIED
                elif stray_added:
                    kind = ChangeKind.ADDED
                else:
                    kind = ChangeKind.REMOVED
                span = _span_of(stray_added or stray_removed)
                unidentified.append(
                    (
                        _Tally(
                            _unidentified(path, span, config),
                            added=len(stray_added),
                            removed=len(stray_removed),
                        ),
                        kind,
                    )
                )

    changes: List[Change] = []
    for idx in sorted(tallies):
        t = tallies[idx]
        changes.append(Change(path, t.unit, _new_unit_kind(t, added_new_lines), t.added, t.removed))
    for idx in sorted(old_tallies):
        t = old_tallies[idx]
        changes.append(Change(path, t.unit, ChangeKind.REMOVED, t.added, t.removed))
    for t, kind in unidentified:
        changes.append(Change(path, t.unit, kind, t.added, t.removed))

    return sorted(changes, key=lambda c: c.unit.span.start)


def _new_unit_kind(t: _Tally, added_new_lines: Set[int]) -> ChangeKind:
    # A unit credited with removed lines occupied that position before
    span = t.unit.span
    if t.removed or not all(line in added_new_lines for line in range(span.start, span.end + 1)):
        return ChangeKind.MODIFIED
    return ChangeKind.ADDED
