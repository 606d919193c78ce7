"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Literal, Optional

if TYPE_CHECKING:
    from rust_diff_analyzer.analysis.models import CodeType

OutputFormat = Literal["terminal", "json", "yaml"]

OUTPUT_FORMATS = ("terminal", "json", "yaml")


class ConfigValidationError(ValueError):
    """Raised when a config value is out of range."""

    def __init__(self, field_name: str, message: str) -> None:
        self.field = field_name
        self.message = message
        super().__init__(f"invalid config field '{field_name}': {message}")


@dataclass
class LimitsConfig:
    max_prod_units: int = 30
    max_weighted_score: int = 100
    max_prod_lines: Optional[int] = None  # unset = no line limit
    fail_on_exceed: bool = True  # exit 1 when a limit fires


@dataclass
class WeightsConfig:
    production: int = 3
    test: int = 1
    test_utility: int = 1
    benchmark: int = 1
    example: int = 1
    build_script: int = 2

    def as_mapping(self) -> Dict[CodeType, int]:
        from rust_diff_analyzer.analysis.models import CodeType

        return {code_type: getattr(self, code_type.value) for code_type in CodeType}


@dataclass
class ClassificationConfig:
    test_attributes: List[str] = field(default_factory=lambda: ["test", "rstest", "test_case"])
    test_features: List[str] = field(default_factory=lambda: ["test-utils", "testing"])
    test_dirs: List[str] = field(default_factory=lambda: ["tests"])
    test_module_names: List[str] = field(default_factory=lambda: ["tests"])
    benchmark_dirs: List[str] = field(default_factory=lambda: ["benches"])
    example_dirs: List[str] = field(default_factory=lambda: ["examples"])
    build_scripts: List[str] = field(default_factory=lambda: ["build.rs"])
    ignore_paths: List[str] = field(default_factory=list)  # fnmatch globs


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_details: bool = True


@dataclass
class Config:
    version: str = "1.0"
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    weights: WeightsConfig = field(default_factory=WeightsConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> None:
        """Raise ConfigValidationError on the first out-of-range value."""
        for name in ("max_prod_units", "max_weighted_score"):
            value = getattr(self.limits, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigValidationError(f"limits.{name}", f"must be a positive integer, got {value!r}")
        lines = self.limits.max_prod_lines
        if lines is not None and (not isinstance(lines, int) or isinstance(lines, bool) or lines <= 0):
            raise ConfigValidationError(
                "limits.max_prod_lines", f"must be a positive integer when set, got {lines!r}"
            )
        for code_type, weight in self.weights.as_mapping().items():
            if not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
                raise ConfigValidationError(
                    f"weights.{code_type.value}", f"must be a non-negative integer, got {weight!r}"
                )
        if self.output.format not in OUTPUT_FORMATS:
            raise ConfigValidationError(
                "output.format", f"must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output.format!r}"
            )
