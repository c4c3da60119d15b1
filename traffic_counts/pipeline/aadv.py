"""Annual Average Daily Volume (AADV) from full-day totals and correction factors."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from ..errors import DbError, InvalidMcd
from ..io.metadata import Direction
from ..kinds import CountKind
from .full_days import DayTotals, drop_excluded_days, get_full_dates, in_out_totals_by_date, totals_by_date

LOGGER = logging.getLogger(__name__)

WEEKDAYS = (0, 1, 2, 3, 4)

AadvResult = Dict[Optional[Direction], float]


class Region(Enum):
    """State of a count, from the prefix of its municipality code."""

    PENNSYLVANIA = "42"
    NEW_JERSEY = "34"

    @classmethod
    def from_mcd(cls, mcd: Optional[str]) -> "Region":
        text = str(mcd or "")
        for region in cls:
            if text.startswith(region.value):
                return region
        raise InvalidMcd(mcd)

    @property
    def seasonal_column(self) -> str:
        return "pafactor" if self is Region.PENNSYLVANIA else "njfactor"

    @property
    def axle_column(self) -> str:
        return "paaxle" if self is Region.PENNSYLVANIA else "njaxle"


def day_of_week_number(day: date) -> int:
    """Day of week numbered from Sunday (1) to Saturday (7)."""
    return day.isoweekday() % 7 + 1


def determine_date(dates: Iterable[date]) -> Optional[date]:
    """First weekday of a count, ignoring its first (partial) day."""
    unique = sorted(set(dates))
    if not unique:
        return None
    for day in unique[1:]:
        if day.weekday() in WEEKDAYS:
            return day
    return None


def average_by_direction(weighted: Dict[Tuple[date, Optional[Direction]], float]) -> AadvResult:
    """Average the weighted day totals of each direction key.

    The divisor is the number of weighted entries over the number of distinct
    direction keys, i.e. the number of full days observed per direction.
    """
    if not weighted:
        return {}
    directions = {direction for _, direction in weighted}
    divisor = len(weighted) // len(directions)
    sums: Dict[Optional[Direction], float] = defaultdict(float)
    for (_, direction), value in weighted.items():
        sums[direction] += value
    return {direction: sums[direction] / divisor for direction in directions}


def round_volume(value: float) -> int:
    return int(math.floor(value + 0.5))


def _parse_header_direction(value: Optional[str], recordnum: int) -> Direction:
    if value is None:
        raise DbError(f"NULL value for 'indir' or 'outdir' field in tc_header table for {recordnum}")
    try:
        return Direction.parse(value)
    except ValueError:
        raise DbError(f"Invalid direction {value!r} in tc_header table for {recordnum}") from None


class AadvCalculator:
    """Compute and store AADV for a record.

    ``store`` is the persistence collaborator; see
    :class:`traffic_counts.database.store.CountStore` for the methods used.
    """

    def __init__(self, store) -> None:
        self.store = store

    def day_totals(self, kind: CountKind, recordnum: int, header) -> DayTotals:
        rows = self.store.count_rows(kind, recordnum)
        full_dates = get_full_dates([row.timestamp for row in rows], recordnum)
        if kind.has_in_out_columns:
            indir = _parse_header_direction(header.indir, recordnum)
            outdir = _parse_header_direction(header.outdir, recordnum)
            totals = in_out_totals_by_date(rows, indir, outdir, full_dates)
        else:
            totals = totals_by_date(rows, full_dates)
        return drop_excluded_days(totals, self.store.excluded_days())

    def _day_factor(self, kind: CountKind, header, day: date, region: Optional[Region]) -> float:
        if kind.factor_source == "bicycle":
            return self.store.bicycle_factor(header.bikepedgroup, day)
        if kind.factor_source == "pedestrian":
            return self.store.pedestrian_factor(day)
        factor = self.store.lookup_factor(header.fc, day, region.seasonal_column)
        if kind.uses_axle_factor:
            factor *= self.store.lookup_factor(header.fc, day, region.axle_column)
        return factor

    def calculate(self, kind: CountKind, recordnum: int) -> AadvResult:
        header = self.store.header(recordnum)
        region = Region.from_mcd(header.mcd) if kind.factor_source == "seasonal" else None
        totals = self.day_totals(kind, recordnum, header)
        equipment = self.store.equipment_factor(header.count_type)

        day_factors: Dict[date, float] = {}
        weighted: Dict[Tuple[date, Optional[Direction]], float] = {}
        for (day, direction), total in sorted(totals.items(), key=lambda item: (item[0][0], _direction_name(item[0][1]))):
            if day not in day_factors:
                day_factors[day] = self._day_factor(kind, header, day, region)
            value = total * day_factors[day]
            if equipment is not None:
                value *= equipment
            weighted[(day, direction)] = value

        results = average_by_direction(weighted)
        LOGGER.debug("%s: AADV from %d full days: %s", recordnum, len(day_factors), results)
        return results

    def calculate_and_insert(
        self, kind: CountKind, recordnum: int, today: Optional[date] = None
    ) -> AadvResult:
        results = self.calculate(kind, recordnum)
        if not results:
            LOGGER.warning("%s: no full days of data, AADV not calculated", recordnum)
            return results
        self.store.replace_aadv(recordnum, results, today or date.today())
        LOGGER.info("%s: AADV %s", recordnum, round_volume(results.get(None, 0.0)))
        return results


def _direction_name(direction: Optional[Direction]) -> str:
    return direction.value if direction is not None else ""
