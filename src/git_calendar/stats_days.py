from __future__ import annotations

import datetime as dt

from .models import DayBucketMap

OUT_OF_RANGE = 99999
DAYS_PER_MONTH = 30

ONE_DAY = dt.timedelta(hours=24)

# datetime.weekday(): Monday == 0 ... Sunday == 6
_ALIGNMENT_BY_WEEKDAY = {
    0: 6,
    1: 5,
    2: 4,
    3: 3,
    4: 2,
    5: 1,
    6: 7,
}


def beginning_of_day(t: dt.datetime) -> dt.datetime:
    return t.replace(hour=0, minute=0, second=0, microsecond=0)


def max_days_for_months(months: int) -> int:
    return months * DAYS_PER_MONTH


def count_days_since_date(date: dt.datetime, max_days: int, now: dt.datetime) -> int:
    """
    Number of 24h steps needed to bring `date` to (or past) today's midnight.

    `date` is the commit's own timestamp and is not normalized, only "today" is.
    Returns OUT_OF_RANGE once the count would exceed `max_days`.
    """
    today = beginning_of_day(now)
    if date >= today:
        return 0
    gap = today - date
    days = gap // ONE_DAY
    if gap % ONE_DAY:
        days += 1
    if days > max_days:
        return OUT_OF_RANGE
    return days


def weekday_alignment(now: dt.datetime | dt.date) -> int:
    """Shift that makes today's offset land on the last slot of the current week."""
    return _ALIGNMENT_BY_WEEKDAY[now.weekday()]


def day_offset(date: dt.datetime, max_days: int, now: dt.datetime) -> int:
    days = count_days_since_date(date, max_days, now)
    if days == OUT_OF_RANGE:
        return OUT_OF_RANGE
    return days + weekday_alignment(now)


def new_bucket_map(max_days: int) -> DayBucketMap:
    buckets: DayBucketMap = {}
    for day in range(max_days, 0, -1):
        buckets[day] = 0
    return buckets


def add_months(t: dt.datetime, months: int) -> dt.datetime:
    """Calendar month arithmetic where day overflow rolls into the next month (31 Oct - 1 month = 1 Oct)."""
    index = t.year * 12 + (t.month - 1) + months
    year, month0 = divmod(index, 12)
    first = t.replace(year=year, month=month0 + 1, day=1)
    return first + dt.timedelta(days=t.day - 1)
