"""Fixed-width time buckets for binning counts."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from enum import Enum
from typing import List, TypeVar, Union

TimeLike = TypeVar("TimeLike", time, datetime)


class TimeInterval(Enum):
    FIFTEEN_MIN = 15
    HOURLY = 60

    @classmethod
    def from_name(cls, name: Union[str, "TimeInterval"]) -> "TimeInterval":
        if isinstance(name, TimeInterval):
            return name
        value = str(name).strip().lower()
        if value in ("15", "15min", "15-min", "fifteen_min", "fifteen-minute"):
            return cls.FIFTEEN_MIN
        if value in ("60", "60min", "hour", "hourly"):
            return cls.HOURLY
        raise ValueError(f"Unknown time interval {name!r}")

    @property
    def minutes(self) -> int:
        return self.value

    @property
    def delta(self) -> timedelta:
        return timedelta(minutes=self.value)


def bin_time(value: TimeLike, interval: TimeInterval = TimeInterval.FIFTEEN_MIN) -> TimeLike:
    """Return the start of the bucket containing ``value``.

    Works for both ``time`` and ``datetime``; seconds are always dropped and the
    minute is snapped down to a multiple of the interval width.
    """
    minute = value.minute - value.minute % interval.minutes
    return value.replace(minute=minute, second=0, microsecond=0)


def create_time_bins(
    first_dt: datetime,
    last_dt: datetime,
    interval: TimeInterval = TimeInterval.FIFTEEN_MIN,
) -> List[datetime]:
    """All bucket starts from the bucket of ``first_dt`` to that of ``last_dt``, inclusive."""
    current = bin_time(first_dt, interval)
    last = bin_time(last_dt, interval)
    bins: List[datetime] = []
    while current <= last:
        bins.append(current)
        current += interval.delta
    return bins
