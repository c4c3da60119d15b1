"""Per-bucket vehicle class and speed range histograms."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..io.counter import IndividualVehicle, VehicleClass
from ..io.metadata import Direction, FieldMetadata
from .binning import TimeInterval, bin_time, create_time_bins

LOGGER = logging.getLogger(__name__)

# upper bound (inclusive) of speed bands s1..s13, s14 takes everything faster
SPEED_BAND_UPPER_BOUNDS = (15.0, 20.0, 25.0, 30.0, 35.0, 40.0, 45.0, 50.0, 55.0, 60.0, 65.0, 70.0, 75.0)

CLASS_FIELDS = tuple(f"c{num}" for num in list(range(1, 14)) + [15])
SPEED_FIELDS = tuple(f"s{num}" for num in range(1, 15))


class BinnedCountKey(NamedTuple):
    timestamp: datetime
    channel: int


@dataclass
class VehicleClassCount:
    """Running vehicle counts by class for one bucket.

    An unclassified vehicle is counted in ``c15`` and also in ``c2``
    (passenger cars), but only once in ``total``.
    """

    recordnum: int
    direction: Direction
    timestamp: Optional[datetime] = None
    lane: Optional[int] = None
    c1: int = 0
    c2: int = 0
    c3: int = 0
    c4: int = 0
    c5: int = 0
    c6: int = 0
    c7: int = 0
    c8: int = 0
    c9: int = 0
    c10: int = 0
    c11: int = 0
    c12: int = 0
    c13: int = 0
    c15: int = 0
    total: int = 0

    def insert(self, vehicle_class: VehicleClass) -> None:
        if vehicle_class is VehicleClass.UNCLASSIFIED:
            self.c2 += 1
        name = f"c{int(vehicle_class)}"
        setattr(self, name, getattr(self, name) + 1)
        self.total += 1

    def counts(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in CLASS_FIELDS}


@dataclass
class SpeedRangeCount:
    """Running vehicle counts by 5 mph speed band for one bucket."""

    recordnum: int
    direction: Direction
    timestamp: Optional[datetime] = None
    lane: Optional[int] = None
    s1: int = 0
    s2: int = 0
    s3: int = 0
    s4: int = 0
    s5: int = 0
    s6: int = 0
    s7: int = 0
    s8: int = 0
    s9: int = 0
    s10: int = 0
    s11: int = 0
    s12: int = 0
    s13: int = 0
    s14: int = 0
    total: int = 0

    def insert(self, speed: float) -> None:
        name = f"s{speed_band(speed)}"
        setattr(self, name, getattr(self, name) + 1)
        self.total += 1

    def counts(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in SPEED_FIELDS}


def speed_band(speed: float) -> int:
    """1-based speed band; anything at or below 15 mph (including negatives) is band 1."""
    for band, upper in enumerate(SPEED_BAND_UPPER_BOUNDS, start=1):
        if speed <= upper:
            return band
    return len(SPEED_FIELDS)


def _drop_edge_buckets(counts: List, first: datetime, last: datetime) -> List:
    return [count for count in counts if count.timestamp not in (first, last)]


def create_speed_and_class_count(
    metadata: FieldMetadata,
    vehicles: Iterable[IndividualVehicle],
    interval: TimeInterval = TimeInterval.FIFTEEN_MIN,
) -> Tuple[List[SpeedRangeCount], List[VehicleClassCount]]:
    """Bin individual vehicles into speed and class histograms per (bucket, channel).

    Empty buckets between the first and last vehicle get explicit zero rows, and
    the partial first and last buckets of every channel are dropped.
    """
    vehicles = list(vehicles)
    if not vehicles:
        return [], []

    recordnum = metadata.recordnum
    directions = metadata.directions
    speed_counts: Dict[BinnedCountKey, SpeedRangeCount] = {}
    class_counts: Dict[BinnedCountKey, VehicleClassCount] = {}

    timestamps: List[datetime] = []
    for vehicle in vehicles:
        direction = directions.for_channel(vehicle.channel)
        if direction is None:
            LOGGER.error("%s: no direction for channel %s", recordnum, vehicle.channel)
            continue
        timestamps.append(vehicle.timestamp)
        key = BinnedCountKey(bin_time(vehicle.timestamp, interval), vehicle.channel)
        if key not in speed_counts:
            speed_counts[key] = SpeedRangeCount(recordnum, direction, key.timestamp, key.channel)
            class_counts[key] = VehicleClassCount(recordnum, direction, key.timestamp, key.channel)
        speed_counts[key].insert(vehicle.speed)
        class_counts[key].insert(vehicle.vehicle_class)

    if not timestamps:
        return [], []
    bins = create_time_bins(min(timestamps), max(timestamps), interval)
    for bucket in bins:
        for channel in directions.channels:
            key = BinnedCountKey(bucket, channel)
            if key in speed_counts:
                continue
            direction = directions.for_channel(channel)
            speed_counts[key] = SpeedRangeCount(recordnum, direction, bucket, channel)
            class_counts[key] = VehicleClassCount(recordnum, direction, bucket, channel)

    speed_rows = [speed_counts[key] for key in sorted(speed_counts)]
    class_rows = [class_counts[key] for key in sorted(class_counts)]
    first, last = bins[0], bins[-1]
    return _drop_edge_buckets(speed_rows, first, last), _drop_edge_buckets(class_rows, first, last)
