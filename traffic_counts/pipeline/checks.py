"""Plausibility checks run over a count once it is stored."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..kinds import CountKind
from .full_days import CountRow

LOGGER = logging.getLogger(__name__)

# the smaller direction of a two-way count should carry at least this share
DIR_PROPORTION_LOWER_BOUND = 0.40
# bicycles in one 15-minute period above this are suspicious
BIKE_COUNT_MAX = 20
CLASS2_MIN_PERCENT = 75.0
UNCLASSIFIED_MAX_PERCENT = 10.0
ZERO_HOURS_START = 4
ZERO_HOURS_END = 22


@dataclass
class CheckResult:
    level: int
    message: str

    @property
    def is_warning(self) -> bool:
        return self.level >= logging.WARNING


def _info(message: str) -> CheckResult:
    return CheckResult(logging.INFO, message)


def _warning(message: str) -> CheckResult:
    return CheckResult(logging.WARNING, message)


def check_class2_share(c2: int, total: int) -> CheckResult:
    if total == 0:
        return _info("Count is empty")
    percent = c2 / total * 100.0
    if percent < CLASS2_MIN_PERCENT:
        return _warning(f"Class 2 vehicles are less than 75% ({percent:.1f}%) of total.")
    return _info("Share of class 2 vehicles is within expectations")


def check_unclassified_share(c15: int, total: int) -> CheckResult:
    if total == 0:
        return _info("Count is empty")
    percent = c15 / total * 100.0
    if percent > UNCLASSIFIED_MAX_PERCENT:
        return _warning(f"Unclassed vehicles are greater than 10% ({percent:.1f}%) of total.")
    return _info("Share of unclassed vehicles is within expectations")


def _proportion_result(volumes: Dict[str, int]) -> CheckResult:
    if not volumes:
        return _info("Count is empty")
    if len(volumes) < 2:
        return _info("Skipping disproportional directionality check - count only one direction.")
    smaller = min(volumes, key=volumes.get)
    larger = max(volumes, key=volumes.get)
    total = volumes[smaller] + volumes[larger]
    if total == 0:
        return _info("Count is empty")
    smaller_share = volumes[smaller] / total
    if smaller_share < DIR_PROPORTION_LOWER_BOUND:
        lower = DIR_PROPORTION_LOWER_BOUND * 100
        return _warning(
            f"Abnormal direction proportions: {smaller} has {smaller_share * 100:.1f}% of total, "
            f"{larger} has {(1 - smaller_share) * 100:.1f}%. "
            f"(Expectation is that proportions are no less/more than {lower:.0f}%/{100 - lower:.0f}%.)"
        )
    return _info("Direction proportions is within expectations")


def check_vehicle_direction_proportion(rows: Iterable[CountRow]) -> CheckResult:
    volumes: Dict[str, int] = defaultdict(int)
    for row in rows:
        if row.direction is not None:
            volumes[row.direction.value] += row.total
    return _proportion_result(dict(volumes))


def check_bike_direction_proportion(
    rows: Iterable[CountRow], indir: Optional[str], outdir: Optional[str]
) -> CheckResult:
    rows = list(rows)
    if not rows or all(row.outcount is None for row in rows):
        return _info("Skipping disproportional directionality check - count only one direction.")
    volumes = {
        indir or "in": sum(row.incount or 0 for row in rows),
        outdir or "out": sum(row.outcount or 0 for row in rows),
    }
    return _proportion_result(volumes)


def check_consecutive_zero_hours(rows: Iterable[CountRow]) -> CheckResult:
    """Warn when two hourly totals in a row are zero between 4:00 and 22:00."""
    hourly: Dict[Tuple[str, datetime], int] = defaultdict(int)
    for row in rows:
        hour = row.timestamp.replace(minute=0, second=0, microsecond=0)
        if not ZERO_HOURS_START <= hour.hour <= ZERO_HOURS_END:
            continue
        direction = row.direction.value if row.direction is not None else ""
        hourly[(direction, hour)] += row.total

    consecutive = 0
    for key in sorted(hourly):
        consecutive = consecutive + 1 if hourly[key] == 0 else 0
        if consecutive > 1:
            return _warning(
                f"Consecutive periods between the hours of {ZERO_HOURS_START}:00 "
                f"and {ZERO_HOURS_END}:00 with zero volumes."
            )
    return _info("No counts with consecutive hourly periods of 0 volume counted.")


def check_excessive_bicycles(
    rows: Iterable[CountRow], indir: Optional[str] = None, outdir: Optional[str] = None
) -> CheckResult:
    found: List[str] = []
    for row in rows:
        if row.incount is None and row.outcount is None:
            volumes = [(row.total, indir or "total")]
        else:
            volumes = [(row.incount or 0, indir or "in"), (row.outcount or 0, outdir or "out")]
        for volume, direction in volumes:
            if volume > BIKE_COUNT_MAX:
                found.append(f"{row.timestamp}: {volume} ({direction}); ")
    if not found:
        return _info("All counts under excessive threshold")
    return _warning(
        f"Found more than {BIKE_COUNT_MAX} bicycles counted in the following periods: {''.join(found)}"
    )


def run_checks(store, kind: CountKind, recordnum: int) -> List[CheckResult]:
    """Run the checks that apply to a count kind against its stored rows."""
    if kind is CountKind.FIFTEEN_MINUTE_PEDESTRIAN:
        return []
    rows = store.count_rows(kind, recordnum)
    results: List[CheckResult] = []
    if kind is CountKind.INDIVIDUAL_VEHICLE:
        c2, c15, total = store.class_share_totals(recordnum)
        results.append(check_unclassified_share(c15, total))
        results.append(check_class2_share(c2, total))
    if kind is CountKind.FIFTEEN_MINUTE_BICYCLE:
        header = store.header(recordnum)
        results.append(check_bike_direction_proportion(rows, header.indir, header.outdir))
        results.append(check_excessive_bicycles(rows, header.indir, header.outdir))
    else:
        results.append(check_vehicle_direction_proportion(rows))
    results.append(check_consecutive_zero_hours(rows))
    LOGGER.debug("%s: %d data checks run", recordnum, len(results))
    return results
