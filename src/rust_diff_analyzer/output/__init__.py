"""Report renderers — terminal, JSON, YAML."""

from rust_diff_analyzer.output import json_report, terminal, yaml_report

__all__ = ["json_report", "terminal", "yaml_report"]
