from __future__ import annotations

import datetime as dt
from pathlib import Path

from .git import BranchWalkError, list_local_branches, log_branch, open_repository
from .models import CommitRecord


def parse_author_date(value: str) -> dt.datetime | None:
    s = (value or "").strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        d = dt.datetime.fromisoformat(s)
    except ValueError:
        return None
    if d.tzinfo is None:
        d = d.replace(tzinfo=dt.timezone.utc)
    return d


def extract_commits(
    repo: Path | str,
    email: str,
    *,
    timeout_s: int = 300,
    skipped_branches: list[str] | None = None,
) -> list[CommitRecord]:
    """
    Authored commits of `email` across all local branches of `repo`, each commit once.

    Raises RepositoryOpenError / ReferenceEnumerationError; a branch whose history
    cannot be read is left out and, when `skipped_branches` is given, its name is
    appended there.
    """
    root = open_repository(Path(repo), timeout_s=timeout_s)
    branches = list_local_branches(root, timeout_s=timeout_s)

    seen: set[str] = set()
    commits: list[CommitRecord] = []
    for name, tip in branches:
        if tip in seen:
            continue
        try:
            rows = log_branch(root, tip, timeout_s=timeout_s)
        except BranchWalkError:
            if skipped_branches is not None:
                skipped_branches.append(name)
            continue

        for sha, author_email, author_iso in rows:
            if sha in seen:
                continue
            seen.add(sha)
            if author_email != email:
                continue
            authored_at = parse_author_date(author_iso)
            if authored_at is None:
                continue
            commits.append(CommitRecord(sha=sha, author_email=author_email, authored_at=authored_at))
    return commits
