"""Analysis engine — orchestrates parse, extract and map over a whole diff."""

from __future__ import annotations

import logging
import time
from fnmatch import fnmatch
from typing import List, Mapping, Optional

from rust_diff_analyzer.analysis.extractor import ParseError, extract_semantic_units
from rust_diff_analyzer.analysis.mapper import map_changes
from rust_diff_analyzer.analysis.models import AnalysisResult, FileAnalysis, SemanticUnit
from rust_diff_analyzer.config.schema import Config
from rust_diff_analyzer.git.diff_parser import parse_diff
from rust_diff_analyzer.git.models import FileDiff, FileStatus

logger = logging.getLogger(__name__)

RUST_SUFFIX = ".rs"


def _skip_reason(file_diff: FileDiff, ignore_globs: List[str]) -> Optional[str]:
    path = file_diff.path
    if file_diff.is_binary:
        return "binary"
    if not path.endswith(RUST_SUFFIX):
        return "not_rust"
    if any(fnmatch(path, g) for g in ignore_globs):
        return "ignored"
    return None


def _old_units(
    file_diff: FileDiff,
    old_sources: Optional[Mapping[str, str]],
    config: Config,
) -> Optional[List[SemanticUnit]]:
    if old_sources is None or file_diff.old_path is None:
        return None
    source = old_sources.get(file_diff.old_path)
    if source is None:
        return None
    try:
        return extract_semantic_units(source, file_diff.old_path, config.classification)
    except ParseError as exc:
        logger.warning("Ignoring old version of %s: %s", file_diff.old_path, exc)
        return None


def analyze(
    diff_text: str,
    sources: Mapping[str, str],
    config: Config,
    *,
    old_sources: Optional[Mapping[str, str]] = None,
    strict: bool = False,
) -> AnalysisResult:
    """Run the full pipeline on *diff_text*.

    *sources* maps new-side paths to their post-change text, *old_sources*
    maps old-side paths to their pre-change text. DiffParseError always
    propagates; ParseError propagates only when *strict* is set, otherwise
    the file is skipped and the message recorded in ``errors``.
    """
    start = time.perf_counter()
    result = AnalysisResult()
    classification = config.classification

    file_diffs = parse_diff(diff_text)
    logger.debug("Parsed %d file sections", len(file_diffs))

    for file_diff in file_diffs:
        entry = FileAnalysis(
            path=file_diff.path,
            old_path=file_diff.old_path if file_diff.is_rename else None,
            status=file_diff.status.value,
        )
        result.files.append(entry)

        entry.skipped = _skip_reason(file_diff, classification.ignore_paths)
        if entry.skipped is not None:
            logger.debug("Skipping %s (%s)", file_diff.path, entry.skipped)
            continue

        if file_diff.status == FileStatus.DELETED:
            units: List[SemanticUnit] = []
        else:
            source = sources.get(file_diff.path)
            if source is None:
                logger.warning("No source available for %s; skipping", file_diff.path)
                entry.skipped = "no_source"
                continue
            try:
                units = extract_semantic_units(source, file_diff.path, classification)
            except ParseError as exc:
                if strict:
                    raise
                logger.warning("%s", exc)
                result.errors.append(str(exc))
                entry.skipped = "parse_error"
                continue

        old_units = _old_units(file_diff, old_sources, config)
        changes = map_changes(file_diff, units, old_units, classification)
        entry.changes = len(changes)
        result.changes.extend(changes)

    elapsed = (time.perf_counter() - start) * 1000
    result.duration_ms = round(elapsed, 2)
    logger.debug(
        "Analysed %d files, %d changes in %.0fms",
        len(result.analyzed_files),
        len(result.changes),
        result.duration_ms,
    )
    return result
