"""Reading raw counter files: count kind detection and record extraction."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import IntEnum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..errors import (
    BadHeader,
    BadLocation,
    BadVehicleClass,
    DirectionLenMismatch,
    LocationHeaderMismatch,
)
from ..kinds import CountKind
from ..pipeline.binning import bin_time
from .metadata import Direction, FieldMetadata, parse_field_metadata

LOGGER = logging.getLogger(__name__)

FIFTEEN_MINUTE_VEHICLE_HEADER = "Number,Date,Time,Channel1"
INDIVIDUAL_VEHICLE_HEADER = "Veh.No.,Date,Time,Channel,Class,Speed"
HEADER_SEARCH_LINES = 50

DATE_FORMAT = "%m/%d/%Y"
INDIVIDUAL_TIME_FORMAT = "%I:%M:%S %p"
FIFTEEN_MINUTE_TIME_FORMAT = "%I:%M %p"
BIKE_PED_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

COUNT_FILE_SUFFIXES = (".csv", ".txt")


class VehicleClass(IntEnum):
    MOTORCYCLES = 1
    PASSENGER_CARS = 2
    OTHER_FOUR_TIRE_SINGLE_UNIT = 3
    BUSES = 4
    TWO_AXLE_SIX_TIRE_SINGLE_UNIT = 5
    THREE_AXLE_SINGLE_UNIT = 6
    FOUR_OR_MORE_AXLE_SINGLE_UNIT = 7
    FOUR_OR_FEWER_AXLE_SINGLE_TRAILER = 8
    FIVE_AXLE_SINGLE_TRAILER = 9
    SIX_OR_MORE_AXLE_SINGLE_TRAILER = 10
    FIVE_OR_FEWER_AXLE_MULTI_TRAILER = 11
    SIX_AXLE_MULTI_TRAILER = 12
    SEVEN_OR_MORE_AXLE_MULTI_TRAILER = 13
    UNCLASSIFIED = 15

    @classmethod
    def from_num(cls, num: int) -> "VehicleClass":
        """Map a counter's class code; 0 and 14 are both unclassified vehicles."""
        if num in (0, 14):
            return cls.UNCLASSIFIED
        if 1 <= num <= 13:
            return cls(num)
        raise BadVehicleClass(num)


@dataclass(frozen=True)
class IndividualVehicle:
    date: date
    time: time
    channel: int
    vehicle_class: VehicleClass
    speed: float

    @property
    def timestamp(self) -> datetime:
        return datetime.combine(self.date, self.time)


@dataclass(frozen=True)
class FifteenMinuteVehicle:
    recordnum: int
    date: date
    time: time
    count: int
    direction: Direction
    lane: int


@dataclass(frozen=True)
class FifteenMinuteBicycle:
    recordnum: int
    date: date
    time: time
    total: int
    indir: Optional[int] = None
    outdir: Optional[int] = None


@dataclass(frozen=True)
class FifteenMinutePedestrian:
    recordnum: int
    date: date
    time: time
    total: int
    indir: Optional[int] = None
    outdir: Optional[int] = None


def _normalize_line(line: str) -> str:
    return line.replace('"', "").replace(" ", "")


def find_header(path: Path) -> Tuple[CountKind, int]:
    """Return the count kind named by the file header and the number of non-data rows."""
    path = Path(path)
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        for num_rows, line in enumerate(fh, start=1):
            if num_rows > HEADER_SEARCH_LINES:
                break
            line = _normalize_line(line)
            if FIFTEEN_MINUTE_VEHICLE_HEADER in line:
                return CountKind.FIFTEEN_MINUTE_VEHICLE, num_rows
            if INDIVIDUAL_VEHICLE_HEADER in line:
                return CountKind.INDIVIDUAL_VEHICLE, num_rows
    raise BadHeader(path)


def count_kind_from_location(path: Path) -> CountKind:
    location = Path(path).parent.name
    for kind in CountKind:
        if kind.value == location:
            return kind
    raise BadLocation(location)


def count_kind_from_header(path: Path) -> CountKind:
    kind, _ = find_header(path)
    return kind


def count_kind(path: Path) -> CountKind:
    """Count kind from the parent directory, confirmed by the header for vehicle files."""
    kind = count_kind_from_location(path)
    if kind in (CountKind.FIFTEEN_MINUTE_VEHICLE, CountKind.INDIVIDUAL_VEHICLE):
        if count_kind_from_header(path) is not kind:
            raise LocationHeaderMismatch(path)
    return kind


def _read_rows(path: Path, skip: int = 0) -> List[List[str]]:
    with Path(path).open("r", encoding="utf-8", errors="replace", newline="") as fh:
        reader = csv.reader(fh)
        rows = []
        for index, row in enumerate(reader):
            if index < skip:
                continue
            row = [value.strip() for value in row]
            if not any(row):
                continue
            rows.append(row)
        return rows


def extract_individual_vehicles(path: Path) -> List[IndividualVehicle]:
    _, skip = find_header(path)
    vehicles: List[IndividualVehicle] = []
    for row in _read_rows(path, skip):
        if len(row) < 6:
            LOGGER.warning("Skipping short row in %s: %s", Path(path).name, row)
            continue
        count_date = datetime.strptime(row[1], DATE_FORMAT).date()
        count_time = datetime.strptime(row[2], INDIVIDUAL_TIME_FORMAT).time()
        try:
            vehicle_class = VehicleClass.from_num(int(row[4]))
        except BadVehicleClass as exc:
            LOGGER.error("%s: %s", Path(path).name, exc)
            continue
        vehicles.append(
            IndividualVehicle(
                date=count_date,
                time=count_time,
                channel=int(row[3]),
                vehicle_class=vehicle_class,
                speed=float(row[5]),
            )
        )
    return vehicles


def extract_fifteen_minute_vehicles(
    path: Path, metadata: Optional[FieldMetadata] = None
) -> List[FifteenMinuteVehicle]:
    metadata = metadata or parse_field_metadata(path)
    _, skip = find_header(path)
    counts: List[FifteenMinuteVehicle] = []
    for row in _read_rows(path, skip):
        count_date = datetime.strptime(row[1], DATE_FORMAT).date()
        count_time = bin_time(datetime.strptime(row[2], FIFTEEN_MINUTE_TIME_FORMAT).time())
        for lane in metadata.directions.channels:
            column = 2 + lane
            if column >= len(row) or row[column] == "":
                raise DirectionLenMismatch(path)
            counts.append(
                FifteenMinuteVehicle(
                    recordnum=metadata.recordnum,
                    date=count_date,
                    time=count_time,
                    count=int(row[column]),
                    direction=metadata.directions.for_channel(lane),
                    lane=lane,
                )
            )
    return counts


def _parse_bike_ped_datetime(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, BIKE_PED_DATETIME_FORMAT)
    except ValueError:
        return None


def _extract_in_out(path: Path, metadata: Optional[FieldMetadata], record_type):
    metadata = metadata or parse_field_metadata(path)
    two_directions = metadata.directions.direction2 is not None
    counts = []
    for row in _read_rows(path):
        count_dt = _parse_bike_ped_datetime(row[0])
        if count_dt is None:
            LOGGER.debug("Skipping non-data row in %s: %s", Path(path).name, row)
            continue
        indir = outdir = None
        if two_directions:
            if len(row) < 4:
                raise DirectionLenMismatch(path)
            indir = int(row[2])
            outdir = int(row[3])
        counts.append(
            record_type(
                recordnum=metadata.recordnum,
                date=count_dt.date(),
                time=count_dt.time(),
                total=int(row[1]),
                indir=indir,
                outdir=outdir,
            )
        )
    return counts


def extract_fifteen_minute_bicycles(
    path: Path, metadata: Optional[FieldMetadata] = None
) -> List[FifteenMinuteBicycle]:
    return _extract_in_out(path, metadata, FifteenMinuteBicycle)


def extract_fifteen_minute_pedestrians(
    path: Path, metadata: Optional[FieldMetadata] = None
) -> List[FifteenMinutePedestrian]:
    return _extract_in_out(path, metadata, FifteenMinutePedestrian)


def iter_count_files(root: Path) -> Iterable[Path]:
    """Yield count files found in the count-kind directories under ``root``."""
    root = Path(root)
    for kind in CountKind:
        directory = root / kind.value
        if not directory.is_dir():
            LOGGER.debug("Skipping %s: directory missing", directory)
            continue
        for candidate in sorted(directory.iterdir()):
            if candidate.is_file() and candidate.suffix.lower() in COUNT_FILE_SUFFIXES:
                yield candidate
            else:
                LOGGER.debug("Skipping %s: not a count file", candidate)

