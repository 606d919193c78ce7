"""Load and merge configuration from .rust-diff-analyzer.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from rust_diff_analyzer.config.schema import (
    OUTPUT_FORMATS,
    ClassificationConfig,
    Config,
    LimitsConfig,
    OutputConfig,
    WeightsConfig,
)

CONFIG_FILENAME = ".rust-diff-analyzer.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _int_env(name: str) -> Optional[int]:
    val = os.environ.get(name)
    if not val:
        return None
    try:
        return int(val)
    except ValueError:
        return None


def _merge_env_overrides(cfg: Config) -> None:
    """Apply RDA_* environment variable overrides."""
    if (units := _int_env("RDA_MAX_PROD_UNITS")) is not None:
        cfg.limits.max_prod_units = units
    if (score := _int_env("RDA_MAX_WEIGHTED_SCORE")) is not None:
        cfg.limits.max_weighted_score = score
    if val := os.environ.get("RDA_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("RDA_IGNORE_PATHS"):
        cfg.classification.ignore_paths.extend(p.strip() for p in val.split(os.pathsep) if p.strip())


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    table = data.get(section, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in table.items() if k in valid_fields}
    return cls(**filtered)


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> Config:
    """Load, validate, and return a Config."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = Config()
    else:
        raw = _parse_toml(config_path)
        cfg = Config(
            version=str(raw.get("version", "1.0")),
            limits=_build_section(raw, LimitsConfig, "limits"),
            weights=_build_section(raw, WeightsConfig, "weights"),
            classification=_build_section(raw, ClassificationConfig, "classification"),
            output=_build_section(raw, OutputConfig, "output"),
        )

    _merge_env_overrides(cfg)
    cfg.validate()
    return cfg
