from __future__ import annotations

import datetime as dt
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, TextIO

from .git import GitCalendarError
from .models import DayBucketMap, RepoScanResult
from .stats_days import OUT_OF_RANGE, day_offset, max_days_for_months, new_bucket_map
from .stats_extract import extract_commits


def add_count(buckets: DayBucketMap, offset: int, count: int = 1) -> None:
    if offset == OUT_OF_RANGE:
        return
    if offset in buckets:
        buckets[offset] += count
    else:
        # Weekday alignment can push the oldest in-window days past max_days.
        buckets[offset] = count


def merge_buckets(target: DayBucketMap, partial: DayBucketMap) -> None:
    for offset in sorted(partial):
        add_count(target, offset, partial[offset])


def fill_commits(
    email: str,
    repo: Path | str,
    buckets: DayBucketMap,
    max_days: int,
    now: dt.datetime,
    *,
    timeout_s: int = 300,
    skipped_branches: list[str] | None = None,
) -> int:
    """Add the repo's commits by `email` to `buckets`; returns how many commits matched the author."""
    commits = extract_commits(repo, email, timeout_s=timeout_s, skipped_branches=skipped_branches)
    for c in commits:
        add_count(buckets, day_offset(c.authored_at, max_days, now))
    return len(commits)


def scan_repository(repo: Path | str, email: str, max_days: int, now: dt.datetime, *, timeout_s: int = 300) -> RepoScanResult:
    result = RepoScanResult(path=str(repo))
    try:
        result.commits = fill_commits(
            email,
            repo,
            result.buckets,
            max_days,
            now,
            timeout_s=timeout_s,
            skipped_branches=result.skipped_branches,
        )
    except GitCalendarError as e:
        result.buckets = {}
        result.error = str(e) or e.__class__.__name__
    return result


def process_repositories(
    repos: Iterable[Path | str],
    email: str,
    months: int,
    now: dt.datetime,
    *,
    jobs: int = 1,
    timeout_s: int = 300,
    err: TextIO | None = None,
) -> tuple[DayBucketMap, list[RepoScanResult]]:
    """
    Scan every repository and sum its commits into one day-offset map.

    Repositories that fail to open are reported on `err` (stderr by default) and
    skipped. Partial maps are merged in input order, whatever `jobs` is.
    """
    if err is None:
        err = sys.stderr
    repo_list = list(repos)
    max_days = max_days_for_months(months)
    commits = new_bucket_map(max_days)

    results: list[RepoScanResult] = []
    if jobs > 1 and len(repo_list) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            futs = [ex.submit(scan_repository, repo, email, max_days, now, timeout_s=timeout_s) for repo in repo_list]
            results = [fut.result() for fut in futs]
    else:
        results = [scan_repository(repo, email, max_days, now, timeout_s=timeout_s) for repo in repo_list]

    for r in results:
        if not r.ok:
            print(f"Skip repo {r.path}: {r.error}", file=err)
            continue
        merge_buckets(commits, r.buckets)
    return commits, results
