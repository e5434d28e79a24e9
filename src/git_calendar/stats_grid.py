from __future__ import annotations

from .models import Column, DayBucketMap, Grid


def build_cols(buckets: DayBucketMap) -> Grid:
    """
    Fold day offsets into week columns (week = offset // 7, slot = offset % 7).

    A column is stored once its slot 6 has been seen; the in-progress column of a
    week that never reaches slot 6 is dropped. Offset 0 never exists, so week 0
    holds offsets 1..6 only.
    """
    cols: Grid = {}
    col: Column = []
    for k in sorted(buckets):
        week = k // 7
        day_in_week = k % 7

        if day_in_week == 0:
            col = []
        col.append(buckets[k])

        if day_in_week == 6:
            cols[week] = list(col)
    return cols


def grid_total(cols: Grid) -> int:
    return sum(sum(col) for col in cols.values())
