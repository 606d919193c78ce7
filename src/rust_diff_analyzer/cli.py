"""rust-diff-analyzer CLI — Typer application with analyze and init commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from rust_diff_analyzer import __version__
from rust_diff_analyzer.git.models import FileDiff, FileStatus

app = typer.Typer(
    name="rust-diff-analyzer",
    help="Classify and score the Rust code touched by a diff.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Route library logging through Rich on stderr."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )


def _resolve_repo_root() -> Path:
    """Find the git repo root, exit 2 on failure."""
    from rust_diff_analyzer.git.adapter import GitError, get_repo_root

    try:
        return get_repo_root()
    except GitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _read_diff_file(diff_file: str) -> str:
    if diff_file == "-":
        return sys.stdin.read()
    try:
        return Path(diff_file).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        console.print(f"[bold red]Error:[/bold red] cannot read diff file: {exc}")
        raise typer.Exit(code=2) from exc


def _collect_sources(
    paths: List[str],
    reader: Callable[[str], Optional[str]],
) -> Dict[str, str]:
    sources: Dict[str, str] = {}
    for path in paths:
        text = reader(path)
        if text is not None:
            sources[path] = text
    return sources


def _rust_paths(file_diffs: List[FileDiff], *, old: bool) -> List[str]:
    """Paths whose source the engine will ask for."""
    paths: List[str] = []
    for fd in file_diffs:
        if fd.is_binary:
            continue
        if old:
            if fd.old_path and fd.status != FileStatus.ADDED and fd.old_path.endswith(".rs"):
                paths.append(fd.old_path)
        elif fd.status != FileStatus.DELETED and fd.path.endswith(".rs"):
            paths.append(fd.path)
    return paths


def _working_tree_reader(root: Path) -> Callable[[str], Optional[str]]:
    def read(path: str) -> Optional[str]:
        p = root / path
        if not p.is_file():
            return None
        return p.read_text(encoding="utf-8", errors="replace")

    return read


def _revision_reader(root: Path, rev: Optional[str]) -> Callable[[str], Optional[str]]:
    from rust_diff_analyzer.git.adapter import read_file_at

    def read(path: str) -> Optional[str]:
        return read_file_at(root, rev, path)

    return read


# ── analyze ───────────────────────────────────────────────────────────────────


@app.command()
def analyze(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .rust-diff-analyzer.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    diff_file: Optional[str] = typer.Option(
        None, "--diff-file", help="Read the diff from a file ('-' for stdin) instead of git"
    ),
    from_ref: Optional[str] = typer.Option(None, "--from", help="Base revision of a commit range"),
    to_ref: Optional[str] = typer.Option(None, "--to", help="Head revision of a commit range (default HEAD)"),
    strict: bool = typer.Option(False, "--strict", help="Fail on Rust files that do not parse"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output with timing"),
) -> None:
    """Analyse staged changes (or a commit range, or a diff file)."""
    from rust_diff_analyzer.analysis.engine import analyze as run_analysis
    from rust_diff_analyzer.analysis.extractor import ParseError
    from rust_diff_analyzer.config.loader import ConfigError, load_config
    from rust_diff_analyzer.config.schema import OUTPUT_FORMATS, ConfigValidationError
    from rust_diff_analyzer.git.adapter import (
        GitError,
        get_range_diff,
        get_repo_root,
        get_staged_diff,
        has_revision,
    )
    from rust_diff_analyzer.git.diff_parser import DiffParseError, parse_diff
    from rust_diff_analyzer.output import json_report, terminal, yaml_report
    from rust_diff_analyzer.scoring import evaluate, summarize

    _configure_logging(verbose, debug)

    if to_ref and not from_ref:
        console.print("[bold red]Error:[/bold red] --to requires --from")
        raise typer.Exit(code=2)

    # --- Locate repository (optional when a diff file is given) ---
    in_repo = True
    if diff_file is None:
        repo_root = _resolve_repo_root()
    else:
        try:
            repo_root = get_repo_root()
        except GitError:
            repo_root = Path.cwd()
            in_repo = False

    # --- Load config ---
    try:
        cfg = load_config(repo_root, config)
    except (ConfigError, ConfigValidationError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    # --- CLI overrides ---
    if format:
        if format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    if verbose or debug:
        console.print(f"[dim]Repo root: {repo_root}[/dim]")
        console.print(
            f"[dim]Limits: units={cfg.limits.max_prod_units} "
            f"score={cfg.limits.max_weighted_score} "
            f"lines={cfg.limits.max_prod_lines}[/dim]"
        )

    # --- Get diff and sources ---
    try:
        if diff_file is not None:
            diff_text = _read_diff_file(diff_file)
            new_reader = _working_tree_reader(repo_root)
            old_rev = from_ref if in_repo else None
        elif from_ref:
            head = to_ref or "HEAD"
            diff_text = get_range_diff(repo_root, from_ref, head)
            new_reader = _revision_reader(repo_root, head)
            old_rev = from_ref
        else:
            diff_text = get_staged_diff(repo_root)
            new_reader = _revision_reader(repo_root, None)
            old_rev = "HEAD" if has_revision(repo_root, "HEAD") else None

        file_diffs = parse_diff(diff_text)
        sources = _collect_sources(_rust_paths(file_diffs, old=False), new_reader)
        old_sources = None
        if old_rev is not None:
            old_sources = _collect_sources(
                _rust_paths(file_diffs, old=True), _revision_reader(repo_root, old_rev)
            )
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except DiffParseError as exc:
        console.print(f"[bold red]Diff error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    # --- Run analysis ---
    try:
        result = run_analysis(diff_text, sources, cfg, old_sources=old_sources, strict=strict)
    except ParseError as exc:
        console.print(f"[bold red]Parse error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    summary = summarize(result.changes, cfg.weights.as_mapping())
    outcome = evaluate(summary, cfg.limits)

    if debug:
        console.print(f"[dim]Analysis duration: {result.duration_ms:.0f}ms[/dim]")

    # --- Output ---
    show_details = cfg.output.show_details
    report_text: Optional[str] = None

    if cfg.output.format == "terminal":
        terminal.render(result, summary, outcome, show_details=show_details)
    elif cfg.output.format == "json":
        report_text = json_report.render(result, summary, outcome, show_details=show_details)
        print(report_text)
    elif cfg.output.format == "yaml":
        report_text = yaml_report.render(result, summary, outcome, show_details=show_details)
        print(report_text, end="")

    # --- Write to file ---
    if output:
        if report_text is None:
            # Terminal output requested on screen; the file gets JSON
            report_text = json_report.render(result, summary, outcome, show_details=show_details)
        Path(output).write_text(report_text, encoding="utf-8")
        if verbose:
            console.print(f"[dim]Report written to {output}[/dim]")

    # --- Exit code ---
    if not outcome.passed and cfg.limits.fail_on_exceed:
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Generate a starter .rust-diff-analyzer.toml in the repo root."""
    from rust_diff_analyzer.config.defaults import DEFAULT_TOML
    from rust_diff_analyzer.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"rust-diff-analyzer {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """rust-diff-analyzer — Classify and score the Rust code touched by a diff."""
