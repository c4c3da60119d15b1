"""Detect which calendar days of a count hold a complete set of intervals."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from ..errors import BadIntervalCount
from ..io.metadata import Direction

LOGGER = logging.getLogger(__name__)

# rows in one day -> minute of the last interval of that day
ROWS_PER_DAY_LAST_MINUTE = {
    24: 0,
    48: 0,
    96: 45,
    192: 45,
}

DayTotals = Dict[Tuple[date, Optional[Direction]], int]


class CountRow(NamedTuple):
    """A stored, binned count row as read back for AADV."""

    countdate: date
    counttime: Union[time, datetime]
    total: int
    direction: Optional[Direction] = None
    incount: Optional[int] = None
    outcount: Optional[int] = None

    @property
    def timestamp(self) -> datetime:
        return combine_date_time(self.countdate, self.counttime)


def combine_date_time(countdate: Union[date, datetime], counttime: Union[time, datetime]) -> datetime:
    """Join a date column with a time column.

    Legacy rows store the time as a full timestamp whose date part is
    meaningless, so only its time of day is used.
    """
    if isinstance(countdate, datetime):
        countdate = countdate.date()
    if isinstance(counttime, datetime):
        counttime = counttime.time()
    return datetime.combine(countdate, counttime)


def get_full_dates(observations: Sequence[datetime], recordnum: Optional[int] = None) -> List[date]:
    """Return the inclusive range of dates that have every interval of the day.

    Counts with more lanes than the interval table knows about repeat each
    timestamp once per lane, so the lookup falls back to the number of
    distinct timestamps when every timestamp carries the same number of rows.
    """
    if not observations:
        return []
    ordered = sorted(observations)
    first_obs = ordered[0]
    last_obs = ordered[-1]

    # a day is only full if its opening interval (00:00) is present
    first_full = first_obs.date()
    if first_obs.time() != time(0, 0):
        first_full += timedelta(days=1)

    first_day = [obs for obs in ordered if obs.date() == first_full]
    rows_on_first_full = len(first_day)
    last_minute = ROWS_PER_DAY_LAST_MINUTE.get(rows_on_first_full)
    if last_minute is None and first_day:
        slots = len(set(first_day))
        if rows_on_first_full % slots == 0:
            last_minute = ROWS_PER_DAY_LAST_MINUTE.get(slots)
    if last_minute is None:
        raise BadIntervalCount(rows_on_first_full, recordnum)

    last_full = last_obs.date()
    if not (last_obs.hour == 23 and last_obs.minute == last_minute):
        last_full -= timedelta(days=1)

    dates: List[date] = []
    current = first_full
    while current <= last_full:
        dates.append(current)
        current += timedelta(days=1)
    LOGGER.debug("Full dates for %s: %s to %s", recordnum, first_full, last_full)
    return dates


def totals_by_date(rows: Iterable[CountRow], full_dates: Iterable[date]) -> DayTotals:
    """Sum totals per (date, direction) plus a (date, None) aggregate, full days only."""
    full = set(full_dates)
    totals: DayTotals = defaultdict(int)
    for row in rows:
        day = row.timestamp.date()
        if day not in full:
            continue
        if row.direction is not None:
            totals[(day, row.direction)] += row.total
        totals[(day, None)] += row.total
    return dict(totals)


def in_out_totals_by_date(
    rows: Iterable[CountRow],
    indir: Direction,
    outdir: Direction,
    full_dates: Iterable[date],
) -> DayTotals:
    """Per-day totals for counts that store directions as in/out columns."""
    full = set(full_dates)
    totals: DayTotals = defaultdict(int)
    for row in rows:
        day = row.timestamp.date()
        if day not in full:
            continue
        totals[(day, indir)] += row.incount or 0
        totals[(day, outdir)] += row.outcount or 0
        totals[(day, None)] += row.total
    return dict(totals)


def drop_excluded_days(totals: DayTotals, excluded: Iterable[date]) -> DayTotals:
    excluded_days = set(excluded)
    return {key: value for key, value in totals.items() if key[0] not in excluded_days}
