from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from .git import infer_user_email
from .repo_registry import DEFAULT_EXCLUDE_DIRNAMES, DEFAULT_REGISTRY_PATH

DEFAULT_CONFIG_PATH = Path.home() / ".git-calendar.json"
DEFAULT_MONTHS = 6
DEFAULT_JOBS = 1
DEFAULT_GIT_TIMEOUT_S = 300


@dataclasses.dataclass(frozen=True)
class CalendarSettings:
    email: str
    months: int = DEFAULT_MONTHS
    registry_path: Path = DEFAULT_REGISTRY_PATH
    exclude_dirnames: tuple[str, ...] = DEFAULT_EXCLUDE_DIRNAMES
    jobs: int = DEFAULT_JOBS
    git_timeout_s: int = DEFAULT_GIT_TIMEOUT_S


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise SystemExit(f"Invalid config file {config_path}: {e}") from e
    if not isinstance(config, dict):
        raise SystemExit(f"Invalid config file {config_path}: expected a JSON object")
    return config


def _int_setting(config: dict, key: str, default: int) -> int:
    value = config.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SystemExit(f"Invalid config value for {key!r}: {value!r}") from e


def resolve_settings(
    config: dict,
    *,
    email: str | None = None,
    months: int | None = None,
    registry_path: Path | None = None,
    jobs: int | None = None,
) -> CalendarSettings:
    """
    Command-line values win over config.json, which wins over defaults.
    The author email falls back to `git config --global user.email`.
    """
    resolved_email = (email or "").strip() or str(config.get("email", "") or "").strip()
    if not resolved_email:
        resolved_email = infer_user_email()

    if registry_path is None:
        registry_cfg = str(config.get("registry_path", "") or "").strip()
        registry_path = Path(registry_cfg).expanduser() if registry_cfg else DEFAULT_REGISTRY_PATH

    exclude_dirnames = tuple(str(d) for d in (config.get("exclude_dirnames") or DEFAULT_EXCLUDE_DIRNAMES) if str(d).strip())

    return CalendarSettings(
        email=resolved_email,
        months=months if months is not None else _int_setting(config, "months", DEFAULT_MONTHS),
        registry_path=registry_path,
        exclude_dirnames=exclude_dirnames,
        jobs=max(1, jobs if jobs is not None else _int_setting(config, "jobs", DEFAULT_JOBS)),
        git_timeout_s=_int_setting(config, "git_timeout_s", DEFAULT_GIT_TIMEOUT_S),
    )
