from __future__ import annotations

import datetime as dt
import os
import subprocess
from pathlib import Path

import pytest

from git_calendar.git import RepositoryOpenError, list_local_branches, open_repository
from git_calendar.stats_extract import extract_commits, parse_author_date

EMAIL = "me@example.com"


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _init_repo(repo: Path) -> None:
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-q"], cwd=repo)
    _run(["git", "symbolic-ref", "HEAD", "refs/heads/main"], cwd=repo)
    _run(["git", "config", "user.name", "Test User"], cwd=repo)
    _run(["git", "config", "user.email", EMAIL], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)


def _commit(repo: Path, *, filename: str, author_date: str, email: str = EMAIL) -> str:
    p = repo / filename
    p.write_text(filename + "\n", encoding="utf-8")
    _run(["git", "add", filename], cwd=repo)
    env = os.environ.copy()
    env["GIT_AUTHOR_EMAIL"] = email
    env["GIT_AUTHOR_DATE"] = author_date
    env["GIT_COMMITTER_DATE"] = author_date
    _run(["git", "commit", "-q", "-m", f"add {filename}"], cwd=repo, env=env)
    return _run(["git", "rev-parse", "HEAD"], cwd=repo).strip()


def test_commit_shared_by_two_branches_is_extracted_once(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    for i in range(5):
        _commit(repo, filename=f"shared{i}.txt", author_date="2025-03-11T12:00:00+0000")
    _run(["git", "branch", "feature"], cwd=repo)
    _commit(repo, filename="main.txt", author_date="2025-03-11T13:00:00+0000")
    _run(["git", "checkout", "-q", "feature"], cwd=repo)
    _commit(repo, filename="feature.txt", author_date="2025-03-11T14:00:00+0000")

    commits = extract_commits(repo, EMAIL)

    assert len(commits) == 7
    assert len({c.sha for c in commits}) == 7
    assert sorted(name for name, _ in list_local_branches(repo)) == ["feature", "main"]


def test_author_email_must_match_exactly(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    mine = _commit(repo, filename="a.txt", author_date="2025-03-10T10:00:00+0000")
    _commit(repo, filename="b.txt", author_date="2025-03-10T11:00:00+0000", email="Me@Example.com")
    _commit(repo, filename="c.txt", author_date="2025-03-10T12:00:00+0000", email="someone@example.com")

    commits = extract_commits(repo, EMAIL)

    assert [c.sha for c in commits] == [mine]
    assert commits[0].author_email == EMAIL


def test_tags_and_detached_commits_are_not_walked(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    _commit(repo, filename="a.txt", author_date="2025-03-10T10:00:00+0000")
    _run(["git", "checkout", "-q", "--detach"], cwd=repo)
    _commit(repo, filename="tagged.txt", author_date="2025-03-10T11:00:00+0000")
    _run(["git", "tag", "only-tag"], cwd=repo)
    _run(["git", "checkout", "-q", "main"], cwd=repo)

    assert len(extract_commits(repo, EMAIL)) == 1


def test_authored_at_keeps_recorded_offset(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    _commit(repo, filename="a.txt", author_date="2025-01-05T23:30:00-0800")

    (c,) = extract_commits(repo, EMAIL)

    assert c.authored_at.utcoffset() == dt.timedelta(hours=-8)
    assert c.authored_at == dt.datetime(2025, 1, 6, 7, 30, tzinfo=dt.timezone.utc)


def test_unreadable_branch_is_skipped(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    base = _commit(repo, filename="a.txt", author_date="2025-03-10T10:00:00+0000")
    _run(["git", "checkout", "-q", "-b", "broken"], cwd=repo)
    lost = _commit(repo, filename="b.txt", author_date="2025-03-10T11:00:00+0000")
    _commit(repo, filename="c.txt", author_date="2025-03-10T12:00:00+0000")
    _run(["git", "checkout", "-q", "main"], cwd=repo)
    (repo / ".git" / "objects" / lost[:2] / lost[2:]).unlink()

    skipped: list[str] = []
    commits = extract_commits(repo, EMAIL, skipped_branches=skipped)

    assert [c.sha for c in commits] == [base]
    assert skipped == ["broken"]


def test_empty_repository_has_no_commits(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    assert extract_commits(repo, EMAIL) == []


def test_missing_path_is_not_a_repository(tmp_path: Path) -> None:
    with pytest.raises(RepositoryOpenError):
        extract_commits(tmp_path / "does-not-exist", EMAIL)


def test_plain_folder_is_not_a_repository(tmp_path: Path) -> None:
    folder = tmp_path / "plain"
    folder.mkdir()
    with pytest.raises(RepositoryOpenError):
        open_repository(folder)


def test_subfolder_of_a_work_tree_is_not_a_repository(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    (repo / "sub").mkdir()
    assert open_repository(repo) == repo.resolve()
    with pytest.raises(RepositoryOpenError):
        open_repository(repo / "sub")


def test_bare_repository_can_be_opened(tmp_path: Path) -> None:
    repo = tmp_path / "r"
    _init_repo(repo)
    _commit(repo, filename="a.txt", author_date="2025-03-10T10:00:00+0000")
    bare = tmp_path / "r.git"
    _run(["git", "clone", "-q", "--bare", str(repo), str(bare)], cwd=tmp_path)

    assert len(extract_commits(bare, EMAIL)) == 1


def test_parse_author_date() -> None:
    assert parse_author_date("2025-03-10T10:00:00Z") == dt.datetime(2025, 3, 10, 10, 0, tzinfo=dt.timezone.utc)
    assert parse_author_date("2025-03-10T10:00:00+02:00").utcoffset() == dt.timedelta(hours=2)
    assert parse_author_date("") is None
    assert parse_author_date("not a date") is None
