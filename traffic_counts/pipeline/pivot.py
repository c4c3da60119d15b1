"""Pivot counts into one row per day with a column for each hour."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Iterable, List, NamedTuple, Optional, Union

from ..io.counter import IndividualVehicle
from ..io.metadata import Direction, FieldMetadata
from .full_days import combine_date_time

LOGGER = logging.getLogger(__name__)

HOUR_SLOTS = tuple(["am12"] + [f"am{hour}" for hour in range(1, 12)] + ["pm12"] + [f"pm{hour}" for hour in range(1, 12)])


class NonNormalCountKey(NamedTuple):
    recordnum: int
    date: date
    direction: Optional[Direction]
    lane: Optional[int]


class VolumeRow(NamedTuple):
    """An hourly (or finer) stored volume, as fed to denormalization."""

    countdate: date
    counttime: Union[time, datetime]
    volume: int
    direction: Optional[Direction] = None
    lane: Optional[int] = None


def _empty_hours() -> List[Optional[int]]:
    return [None] * 24


@dataclass
class NonNormalVolCount:
    total: int = 0
    hours: List[Optional[int]] = field(default_factory=_empty_hours)

    def add(self, hour: int, volume: int) -> None:
        self.hours[hour] = (self.hours[hour] or 0) + volume
        self.total += volume

    def columns(self) -> Dict[str, Optional[int]]:
        return dict(zip(HOUR_SLOTS, self.hours))


@dataclass
class NonNormalAvgSpeedCount:
    hours: List[Optional[float]] = field(default_factory=_empty_hours)

    def columns(self) -> Dict[str, Optional[float]]:
        return dict(zip(HOUR_SLOTS, self.hours))


def _hour_start(value: datetime) -> datetime:
    return value.replace(minute=0, second=0, microsecond=0)


def _complete_hour_vehicles(vehicles: List[IndividualVehicle]) -> List[IndividualVehicle]:
    """Drop vehicles seen in the first or last hour of the count, which are partial."""
    if not vehicles:
        return []
    hours = [_hour_start(vehicle.timestamp) for vehicle in vehicles]
    first_hour, last_hour = min(hours), max(hours)
    return [
        vehicle
        for vehicle, hour in zip(vehicles, hours)
        if hour != first_hour and hour != last_hour
    ]


def _key_for(metadata: FieldMetadata, vehicle: IndividualVehicle) -> Optional[NonNormalCountKey]:
    direction = metadata.directions.for_channel(vehicle.channel)
    if direction is None:
        LOGGER.error("%s: no direction for channel %s", metadata.recordnum, vehicle.channel)
        return None
    return NonNormalCountKey(metadata.recordnum, vehicle.date, direction, vehicle.channel)


def create_non_normal_vol_count(
    metadata: FieldMetadata, vehicles: Iterable[IndividualVehicle]
) -> Dict[NonNormalCountKey, NonNormalVolCount]:
    counts: Dict[NonNormalCountKey, NonNormalVolCount] = {}
    for vehicle in _complete_hour_vehicles(list(vehicles)):
        key = _key_for(metadata, vehicle)
        if key is None:
            continue
        counts.setdefault(key, NonNormalVolCount()).add(vehicle.time.hour, 1)
    return counts


def create_non_normal_speed_avg_count(
    metadata: FieldMetadata, vehicles: Iterable[IndividualVehicle]
) -> Dict[NonNormalCountKey, NonNormalAvgSpeedCount]:
    """Average speed per hour; hours without vehicles stay empty rather than 0."""
    speeds: Dict[NonNormalCountKey, Dict[int, List[float]]] = defaultdict(lambda: defaultdict(list))
    for vehicle in _complete_hour_vehicles(list(vehicles)):
        key = _key_for(metadata, vehicle)
        if key is None:
            continue
        speeds[key][vehicle.time.hour].append(vehicle.speed)

    averages: Dict[NonNormalCountKey, NonNormalAvgSpeedCount] = {}
    for key, by_hour in speeds.items():
        row = NonNormalAvgSpeedCount()
        for hour, values in by_hour.items():
            if values:
                row.hours[hour] = sum(values) / len(values)
        averages[key] = row
    return averages


def denormalize_vol_count(
    recordnum: int, rows: Iterable[VolumeRow]
) -> Dict[NonNormalCountKey, NonNormalVolCount]:
    """Pivot stored volumes into hourly columns, summing rows that share an hour."""
    counts: Dict[NonNormalCountKey, NonNormalVolCount] = {}
    for row in rows:
        observed = combine_date_time(row.countdate, row.counttime)
        key = NonNormalCountKey(recordnum, observed.date(), row.direction, row.lane)
        counts.setdefault(key, NonNormalVolCount()).add(observed.hour, row.volume)
    return counts


def sorted_rows(counts: Dict[NonNormalCountKey, object]) -> List:
    """(key, row) pairs in a deterministic order for persisting."""
    def sort_key(item):
        key = item[0]
        direction = key.direction.value if key.direction is not None else ""
        return (key.recordnum, key.date, direction, key.lane or 0)

    return sorted(counts.items(), key=sort_key)
