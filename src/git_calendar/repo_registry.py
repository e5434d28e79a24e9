from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .git import discover_git_roots

DEFAULT_REGISTRY_PATH = Path.home() / ".gitlocalstats"
DEFAULT_EXCLUDE_DIRNAMES = ("vendor", "node_modules")


def scan_folder(folder: Path | str, exclude_dirnames: Iterable[str] = DEFAULT_EXCLUDE_DIRNAMES) -> list[Path]:
    """Every directory under `folder` that holds a `.git` entry (dependency folders skipped)."""
    root = Path(str(folder).rstrip("/") or "/").expanduser().resolve()
    return discover_git_roots(root, set(exclude_dirnames))


def merge(existing: list[str], new: Iterable[str]) -> list[str]:
    out = list(existing)
    seen = set(out)
    for path in new:
        if path in seen:
            continue
        seen.add(path)
        out.append(path)
    return out


class RepoRegistry:
    """Flat text file of repository paths, one per line, only ever appended to."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_REGISTRY_PATH

    def load(self) -> list[str]:
        if not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [line.strip() for line in lines if line.strip()]

    def save(self, repos: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        text = "\n".join(repos) + "\n" if repos else ""
        self.path.write_text(text, encoding="utf-8")

    def add(self, repos: Iterable[Path | str]) -> list[str]:
        merged = merge(self.load(), [str(r) for r in repos])
        self.save(merged)
        return merged
