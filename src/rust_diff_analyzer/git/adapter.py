"""Git subprocess wrapper — staged diff, range diff, file contents."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

_MISSING_PATH_MARKERS = ("does not exist", "exists on disk, but not in")


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _exec_git(args: list[str], cwd: Path, timeout: int = 30) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")


def _run_git(args: list[str], cwd: Path, timeout: int = 30) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    result = _exec_git(args, cwd, timeout)
    if result.returncode != 0:
        stderr = result.stderr.strip()
        # Empty diff is not an error
        if not stderr or "fatal" not in stderr.lower():
            return result.stdout
        raise GitError(f"git error: {stderr}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    return Path(out.strip())


def get_staged_diff(repo_root: Path) -> str:
    """Return the unified diff of staged changes (--cached), with renames."""
    return _run_git(
        ["diff", "--cached", "-M", "--no-color", "--no-ext-diff"],
        cwd=repo_root,
    )


def get_range_diff(repo_root: Path, base: str, head: str) -> str:
    """Return the unified diff between two revisions, with renames."""
    return _run_git(
        ["diff", f"{base}..{head}", "-M", "--no-color", "--no-ext-diff"],
        cwd=repo_root,
    )


def has_revision(repo_root: Path, rev: str) -> bool:
    """True if *rev* names a commit (False in a repo without commits)."""
    result = _exec_git(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"], cwd=repo_root)
    return result.returncode == 0


def read_file_at(repo_root: Path, rev: Optional[str], path: str) -> Optional[str]:
    """Return *path* as of *rev*, or None if it does not exist there.

    ``rev=None`` reads the staged (index) version.
    """
    spec = f":{path}" if rev is None else f"{rev}:{path}"
    result = _exec_git(["show", spec], cwd=repo_root)
    if result.returncode == 0:
        return result.stdout
    stderr = result.stderr.strip()
    if any(marker in stderr for marker in _MISSING_PATH_MARKERS):
        return None
    raise GitError(f"git error: {stderr}")
