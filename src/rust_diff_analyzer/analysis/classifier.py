"""Code purpose classification from a unit's syntactic context.

Pure and total: the result depends only on the arguments, and every input
maps to some CodeType. Precedence, highest first:

1. build script file            → BUILD_SCRIPT
2. file under a benchmark dir   → BENCHMARK
3. file under an example dir    → EXAMPLE
4. unit annotated ``#[bench]``  → BENCHMARK
5. unit annotated as a test, or a ``cfg`` requiring ``test`` on the unit
   or an enclosing scope        → TEST
6. inside a test-only scope without being a test (test-feature ``cfg``,
   integration test dir, test module, enclosing test fn) → TEST_UTILITY
7. otherwise                    → PRODUCTION
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Callable, Optional, Sequence, Tuple

from rust_diff_analyzer.analysis.models import Attribute, CfgPredicate, CodeType
from rust_diff_analyzer.config.schema import ClassificationConfig

_BENCH_ATTRIBUTE = "bench"
_ROOT_MODULE_FILES = ("lib", "main", "mod")


def normalise_path(file_path: str) -> str:
    """Forward slashes, no leading ``./``."""
    path = file_path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def _dirs(file_path: str) -> Tuple[str, ...]:
    return PurePosixPath(normalise_path(file_path)).parts[:-1]


def is_build_script(file_path: str, config: ClassificationConfig) -> bool:
    """``build.rs`` at a crate root (never inside ``src/``)."""
    p = PurePosixPath(normalise_path(file_path))
    return p.name in config.build_scripts and "src" not in p.parts[:-1]


def module_path_for(file_path: str) -> Tuple[str, ...]:
    """Module segments implied by a file's location.

    ``src/net/tests.rs`` → ``("net", "tests")``; ``src/lib.rs`` → ``()``.
    Files outside ``src/`` contribute their stem only.
    """
    parts = PurePosixPath(normalise_path(file_path)).parts
    if not parts:
        return ()
    dirs = parts[:-1]
    if "src" in dirs:
        idx = max(i for i, d in enumerate(dirs) if d == "src")
        rel = list(parts[idx + 1:])
    else:
        rel = [parts[-1]]
    stem = PurePosixPath(rel[-1]).stem
    if stem in _ROOT_MODULE_FILES:
        rel = rel[:-1]
    else:
        rel[-1] = stem
    return tuple(rel)


def cfg_requires(predicate: CfgPredicate, matches: Callable[[CfgPredicate], bool]) -> bool:
    """True if *predicate* can only hold when an option satisfying *matches* is set."""
    if predicate.op == "option":
        return matches(predicate)
    if predicate.op == "all":
        return any(cfg_requires(arg, matches) for arg in predicate.args)
    if predicate.op == "any":
        return bool(predicate.args) and all(cfg_requires(arg, matches) for arg in predicate.args)
    # not(...) and anything unreadable never restrict to tests
    return False


def _is_test_option(option: CfgPredicate) -> bool:
    return option.name == "test" and option.value is None


def _test_feature_matcher(config: ClassificationConfig) -> Callable[[CfgPredicate], bool]:
    def matches(option: CfgPredicate) -> bool:
        if _is_test_option(option):
            return True
        return option.name == "feature" and option.value in config.test_features

    return matches


def classify(
    attributes: Sequence[Attribute],
    enclosing: Sequence[Attribute],
    module_path: Sequence[str],
    file_path: str,
    config: Optional[ClassificationConfig] = None,
) -> CodeType:
    """Return the CodeType of a unit.

    *attributes* are the unit's own outer attributes, *enclosing* those of
    every surrounding scope (outer and inner), *module_path* the module
    segments from the crate root down to the unit.
    """
    config = config or ClassificationConfig()
    path = normalise_path(file_path)
    dirs = _dirs(path)

    if is_build_script(path, config):
        return CodeType.BUILD_SCRIPT
    if any(d in config.benchmark_dirs for d in dirs):
        return CodeType.BENCHMARK
    if any(d in config.example_dirs for d in dirs):
        return CodeType.EXAMPLE
    if any(a.name == _BENCH_ATTRIBUTE for a in attributes):
        return CodeType.BENCHMARK

    if any(a.name in config.test_attributes for a in attributes):
        return CodeType.TEST
    cfgs = [a.cfg for a in (*attributes, *enclosing) if a.cfg is not None]
    if any(cfg_requires(c, _is_test_option) for c in cfgs):
        return CodeType.TEST

    test_feature = _test_feature_matcher(config)
    if any(cfg_requires(c, test_feature) for c in cfgs):
        return CodeType.TEST_UTILITY
    if any(d in config.test_dirs for d in dirs):
        return CodeType.TEST_UTILITY
    if any(segment in config.test_module_names for segment in module_path):
        return CodeType.TEST_UTILITY
    if any(a.name in config.test_attributes for a in enclosing):
        return CodeType.TEST_UTILITY

    return CodeType.PRODUCTION
