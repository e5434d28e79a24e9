from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional


class GitCalendarError(RuntimeError):
    pass


class RepositoryOpenError(GitCalendarError):
    """The path is missing or is not itself a git repository."""


class ReferenceEnumerationError(GitCalendarError):
    """Local branches of an opened repository could not be listed."""


class BranchWalkError(GitCalendarError):
    """The history of a single branch could not be traversed."""


def run_git(
    args: list[str],
    cwd: Path,
    timeout_s: int = 300,
    env: Optional[dict[str, str]] = None,
) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
        env=env,
    )
    return proc.returncode, proc.stdout, proc.stderr


def discover_git_roots(root: Path, exclude_dirnames: set[str]) -> list[Path]:
    roots: list[Path] = []

    def onerror(err: OSError) -> None:
        _ = err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        has_git = ".git" in dirnames or ".git" in filenames
        if has_git:
            roots.append(Path(dirpath))
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirnames and d != ".git")
    return roots


def _first_line(text: str) -> str:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return ""


def open_repository(path: Path, timeout_s: int = 300) -> Path:
    """
    Check that `path` itself is a git repository (work tree root or bare repo).

    Parent directories are never searched, so a plain folder inside some other
    checkout is rejected. Returns the resolved path.
    """
    p = Path(path).expanduser()
    if not p.is_dir():
        raise RepositoryOpenError(f"repository does not exist: {p}")
    resolved = p.resolve()

    env = os.environ.copy()
    env["GIT_CEILING_DIRECTORIES"] = str(resolved.parent)
    try:
        code, out, err = run_git(["rev-parse", "--git-dir", "--show-prefix"], cwd=resolved, timeout_s=timeout_s, env=env)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise RepositoryOpenError(str(e)) from e
    if code != 0:
        raise RepositoryOpenError(_first_line(err) or "repository does not exist")
    lines = out.splitlines()
    # --show-prefix is empty at the top of a work tree and inside a bare repo's git dir.
    prefix = lines[1].strip() if len(lines) > 1 else ""
    if prefix:
        raise RepositoryOpenError(f"not a repository root (inside work tree at {prefix!r})")
    return resolved


def list_local_branches(repo: Path, timeout_s: int = 300) -> list[tuple[str, str]]:
    """Return (branch name, tip sha) for every ref under refs/heads/."""
    try:
        code, out, err = run_git(
            ["for-each-ref", "--format=%(refname:short)\t%(objectname)", "refs/heads/"],
            cwd=repo,
            timeout_s=timeout_s,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ReferenceEnumerationError(str(e)) from e
    if code != 0:
        raise ReferenceEnumerationError(_first_line(err) or f"git for-each-ref exited with {code}")

    branches: list[tuple[str, str]] = []
    for line in out.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            name, sha = line.split("\t", 1)
        except ValueError:
            continue
        if name and sha:
            branches.append((name, sha.strip()))
    return branches


def log_branch(repo: Path, tip: str, timeout_s: int = 300) -> list[tuple[str, str, str]]:
    """Return (sha, author email, author date ISO) for every commit reachable from `tip`."""
    try:
        code, out, err = run_git(
            ["log", tip, "--date=iso-strict", "--format=%H%x09%ae%x09%aI"],
            cwd=repo,
            timeout_s=timeout_s,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise BranchWalkError(str(e)) from e
    if code != 0:
        raise BranchWalkError(_first_line(err) or f"git log exited with {code}")

    rows: list[tuple[str, str, str]] = []
    for line in out.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        rows.append((parts[0].strip(), parts[1], parts[2].strip()))
    return rows


def infer_user_email(timeout_s: int = 30) -> str:
    try:
        code, out, _ = run_git(["config", "--global", "--get", "user.email"], cwd=Path.cwd(), timeout_s=timeout_s)
    except (OSError, subprocess.TimeoutExpired):
        return ""
    if code == 0:
        return out.strip()
    return ""
