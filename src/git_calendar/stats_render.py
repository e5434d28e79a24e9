from __future__ import annotations

import datetime as dt
import sys
from typing import TextIO

from .models import DayBucketMap, Grid
from .stats_days import DAYS_PER_MONTH, add_months, beginning_of_day, weekday_alignment
from .stats_grid import build_cols

RESET = "\033[0m"
STYLE_EMPTY = "\033[0;37;30m"
STYLE_LOW = "\033[1;30;47m"  # 1-4, light gray
STYLE_MEDIUM = "\033[1;30;43m"  # 5-9, yellow
STYLE_HIGH = "\033[1;30;42m"  # 10+, green
STYLE_TODAY = "\033[1;37;45m"

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DAY_LABELS = {
    1: " Mon ",
    3: " Wed ",
    5: " Fri ",
}
BLANK_DAY_LABEL = "     "


def cell_style(val: int, today: bool) -> tuple[str, str]:
    """Return (escape, glyph) for a cell; the today highlight wins over every count tier."""
    escape = STYLE_EMPTY
    if 0 < val < 5:
        escape = STYLE_LOW
    elif 5 <= val < 10:
        escape = STYLE_MEDIUM
    elif val >= 10:
        escape = STYLE_HIGH
    if today:
        escape = STYLE_TODAY

    if val == 0:
        return escape, " - "
    return escape, f" {val} "


def format_cell(val: int, today: bool) -> str:
    escape, glyph = cell_style(val, today)
    return escape + glyph + RESET


def day_label(row: int) -> str:
    return DAY_LABELS.get(row, BLANK_DAY_LABEL)


def weeks_for_months(months: int) -> int:
    # truncates toward zero for negative windows
    return int(months * DAYS_PER_MONTH / 7)


def render_months(months: int, now: dt.datetime) -> str:
    week = add_months(beginning_of_day(now), -months)
    month = week.month
    parts = ["  "]
    while True:
        if week.month != month:
            parts.append(f"{MONTH_ABBR[week.month - 1]} ")
            month = week.month
        else:
            parts.append("  ")
        week = week + dt.timedelta(days=7)
        if week > now:
            break
    return "".join(parts) + "\n"


def cell_value(cols: Grid, week: int, row: int) -> int:
    col = cols.get(week)
    if col is not None and len(col) > row:
        return col[row]
    return 0


def render_cells(cols: Grid, months: int, now: dt.datetime) -> str:
    weeks = weeks_for_months(months)
    today_row = weekday_alignment(now) - 1
    lines: list[str] = []
    for j in range(6, -1, -1):
        parts: list[str] = []
        for i in range(weeks + 1, -1, -1):
            if i == weeks + 1:
                parts.append(day_label(j))
            parts.append(format_cell(cell_value(cols, i, j), i == 0 and j == today_row))
        lines.append("".join(parts))
    return "\n".join(lines) + "\n"


def render_calendar(cols: Grid, months: int, now: dt.datetime) -> str:
    return render_months(months, now) + render_cells(cols, months, now)


def print_commits_stats(commits: DayBucketMap, months: int, now: dt.datetime, out: TextIO | None = None) -> None:
    if out is None:
        out = sys.stdout
    cols = build_cols(commits)
    out.write(render_calendar(cols, months, now))
    out.flush()
