from __future__ import annotations

import dataclasses
import datetime as dt

Column = list[int]  # one week of daily counts
Grid = dict[int, Column]  # week index -> column, 0 = most recent week
DayBucketMap = dict[int, int]  # days before today (aligned) -> commits


@dataclasses.dataclass(frozen=True)
class CommitRecord:
    sha: str
    author_email: str
    authored_at: dt.datetime


@dataclasses.dataclass
class RepoScanResult:
    path: str
    buckets: DayBucketMap = dataclasses.field(default_factory=dict)
    commits: int = 0
    skipped_branches: list[str] = dataclasses.field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

