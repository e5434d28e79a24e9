from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path
from typing import Iterable, TextIO

from .config import CalendarSettings
from .repo_registry import RepoRegistry, scan_folder
from .stats_aggregate import process_repositories
from .stats_render import print_commits_stats


def scan(
    folder: Path | str,
    registry: RepoRegistry,
    *,
    exclude_dirnames: Iterable[str],
    out: TextIO | None = None,
) -> list[str]:
    """Find repositories under `folder` and add them to the registry."""
    if out is None:
        out = sys.stdout
    print("Found folders:\n", file=out)
    repos = [str(p) for p in scan_folder(folder, exclude_dirnames)]
    for repo in repos:
        print(repo, file=out)
    merged = registry.add(repos)
    print("\n\nSuccessfully added\n", file=out)
    return merged


def stats(
    settings: CalendarSettings,
    *,
    repos: Iterable[Path | str] | None = None,
    now: dt.datetime | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """
    Render the contribution calendar of `settings.email`.

    `repos` defaults to the registry at `settings.registry_path`; `now` defaults
    to the local wall clock.
    """
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    if now is None:
        now = dt.datetime.now().astimezone()
    if repos is None:
        repos = RepoRegistry(settings.registry_path).load()

    repo_list = list(repos)
    if not repo_list:
        print(f"Warning: no repositories registered in {settings.registry_path}; add some with --add <folder>.", file=err)

    commits, _results = process_repositories(
        repo_list,
        settings.email,
        settings.months,
        now,
        jobs=settings.jobs,
        timeout_s=settings.git_timeout_s,
        err=err,
    )
    print_commits_stats(commits, settings.months, now, out=out)
    return 0
