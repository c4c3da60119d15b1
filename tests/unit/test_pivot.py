from datetime import date, datetime, time

import pytest

from traffic_counts.io.counter import IndividualVehicle, VehicleClass
from traffic_counts.io.metadata import Direction, Directions, FieldMetadata
from traffic_counts.pipeline.pivot import (
    HOUR_SLOTS,
    NonNormalCountKey,
    VolumeRow,
    create_non_normal_speed_avg_count,
    create_non_normal_vol_count,
    denormalize_vol_count,
)

METADATA = FieldMetadata("rc", 165367, Directions(Direction.EAST, Direction.WEST), "38397", 45)


def _vehicle(day: int, hour: int, minute: int, channel: int = 1, speed: float = 30.0):
    return IndividualVehicle(date(2023, 11, day), time(hour, minute), channel, VehicleClass.PASSENGER_CARS, speed)


def _vehicles():
    return [
        _vehicle(6, 11, 50),  # first hour, excluded
        _vehicle(6, 12, 10, speed=40.0),
        _vehicle(6, 12, 40, speed=50.0),
        _vehicle(6, 12, 45, channel=2, speed=20.0),
        _vehicle(6, 23, 59),
        _vehicle(7, 0, 5, speed=35.0),
        _vehicle(7, 9, 5),  # last hour, excluded
        _vehicle(7, 9, 30),
    ]


def test_hour_slot_names():
    assert len(HOUR_SLOTS) == 24
    assert HOUR_SLOTS[0] == "am12"
    assert HOUR_SLOTS[11] == "am11"
    assert HOUR_SLOTS[12] == "pm12"
    assert HOUR_SLOTS[23] == "pm11"


def test_volume_pivot_excludes_edge_hours():
    counts = create_non_normal_vol_count(METADATA, _vehicles())
    east_6 = counts[NonNormalCountKey(165367, date(2023, 11, 6), Direction.EAST, 1)]
    assert east_6.total == 3
    assert east_6.hours[12] == 2
    assert east_6.hours[23] == 1
    assert east_6.hours[11] is None
    assert east_6.columns()["pm12"] == 2
    assert east_6.columns()["am11"] is None

    west_6 = counts[NonNormalCountKey(165367, date(2023, 11, 6), Direction.WEST, 2)]
    assert west_6.total == 1

    east_7 = counts[NonNormalCountKey(165367, date(2023, 11, 7), Direction.EAST, 1)]
    assert east_7.total == 1
    assert east_7.hours[0] == 1
    assert east_7.hours[9] is None
    assert len(counts) == 3


def test_speed_pivot_averages_and_leaves_empty_hours_absent():
    averages = create_non_normal_speed_avg_count(METADATA, _vehicles())
    east_6 = averages[NonNormalCountKey(165367, date(2023, 11, 6), Direction.EAST, 1)]
    assert east_6.hours[12] == pytest.approx(45.0)
    assert east_6.hours[23] == pytest.approx(30.0)
    assert east_6.hours[11] is None
    assert east_6.hours[13] is None

    east_7 = averages[NonNormalCountKey(165367, date(2023, 11, 7), Direction.EAST, 1)]
    assert east_7.hours[0] == pytest.approx(35.0)
    assert east_7.hours[9] is None


def test_denormalize_sums_rows_within_an_hour():
    rows = [
        VolumeRow(date(2023, 11, 7), datetime(2023, 11, 7, 8, 0), 10, Direction.EAST, 1),
        VolumeRow(date(2023, 11, 7), datetime(2023, 11, 7, 8, 15), 12, Direction.EAST, 1),
        VolumeRow(date(2023, 11, 7), datetime(2023, 11, 7, 8, 0), 3, Direction.WEST, 2),
        VolumeRow(date(2023, 11, 7), time(17, 45), 7, Direction.EAST, 1),
        VolumeRow(date(2023, 11, 8), time(0, 0), 1, Direction.EAST, 1),
    ]
    counts = denormalize_vol_count(165367, rows)
    east = counts[NonNormalCountKey(165367, date(2023, 11, 7), Direction.EAST, 1)]
    assert east.hours[8] == 22
    assert east.hours[17] == 7
    assert east.total == 29
    assert east.hours[0] is None
    assert counts[NonNormalCountKey(165367, date(2023, 11, 7), Direction.WEST, 2)].total == 3
    assert counts[NonNormalCountKey(165367, date(2023, 11, 8), Direction.EAST, 1)].columns()["am12"] == 1
