from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, load_config, resolve_settings
from .repo_registry import RepoRegistry
from .stats_run import scan, stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-calendar",
        description="Show a contribution calendar of your commits across local git repos.",
    )
    parser.add_argument("--add", type=str, default="", help="Add a new folder to scan for git repositories.")
    parser.add_argument("--list", action="store_true", help="List the registered repositories and exit.")
    parser.add_argument("--email", type=str, default=None, help="Author email to count (default: config, then git user.email).")
    parser.add_argument("--months", type=int, default=None, help="Number of months back to include (default: 6).")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config JSON.")
    parser.add_argument("--registry", type=Path, default=None, help="Path to the repository list file (default: ~/.gitlocalstats).")
    parser.add_argument("--jobs", type=int, default=None, help="Repositories scanned in parallel (default: 1).")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    settings = resolve_settings(
        config,
        email=args.email,
        months=args.months,
        registry_path=args.registry,
        jobs=args.jobs,
    )
    registry = RepoRegistry(settings.registry_path)

    if args.add:
        folder = Path(args.add).expanduser()
        if not folder.is_dir():
            print(f"Folder to scan does not exist: {folder}", file=sys.stderr)
            return 2
        scan(args.add, registry, exclude_dirnames=settings.exclude_dirnames)
        return 0
    if args.list:
        for repo in registry.load():
            print(repo)
        return 0

    if not settings.email:
        print("Please provide an email with --email (or set user.email in your git config).", file=sys.stderr)
        return 2

    return stats(settings)


if __name__ == "__main__":
    raise SystemExit(main())
