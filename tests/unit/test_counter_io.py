from datetime import date, time
from pathlib import Path

import pytest

from traffic_counts.errors import BadHeader, BadLocation, DirectionLenMismatch, LocationHeaderMismatch
from traffic_counts.io.counter import (
    VehicleClass,
    count_kind,
    extract_fifteen_minute_bicycles,
    extract_fifteen_minute_pedestrians,
    extract_fifteen_minute_vehicles,
    extract_individual_vehicles,
    find_header,
    iter_count_files,
)
from traffic_counts.io.metadata import Direction
from traffic_counts.kinds import CountKind

INDIVIDUAL = """Counter export
Site,40972
"",""
"Veh. No.","Date","Time","Channel","Class","Speed"
1,11/6/2023,10:41:07 AM,1,2,34.5
2,11/6/2023,10:42:15 AM,2,0,-0.0
3,11/6/2023,10:43:00 AM,2,99,40.0
4,11/6/2023,1:05:00 PM,1,9,51.2
"""

FIFTEEN_MINUTE = """Counter export
Number,Date,Time,Channel 1,Channel 2
1,11/6/2023,10:45 AM,12,8
2,11/6/2023,11:00 AM,15,9
"""


def _write(root: Path, kind: str, name: str, text: str) -> Path:
    directory = root / kind
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def test_individual_vehicle_extraction(tmp_path):
    path = _write(tmp_path, "vehicle", "rc-166905-ew-40972-35.txt", INDIVIDUAL)
    assert find_header(path) == (CountKind.INDIVIDUAL_VEHICLE, 4)
    assert count_kind(path) is CountKind.INDIVIDUAL_VEHICLE

    vehicles = extract_individual_vehicles(path)
    # the class 99 row is skipped
    assert len(vehicles) == 3
    assert vehicles[0].date == date(2023, 11, 6)
    assert vehicles[0].time == time(10, 41, 7)
    assert vehicles[1].vehicle_class is VehicleClass.UNCLASSIFIED
    assert vehicles[1].channel == 2
    assert vehicles[2].time == time(13, 5)
    assert vehicles[2].speed == pytest.approx(51.2)


def test_fifteen_minute_vehicle_extraction(tmp_path):
    path = _write(tmp_path, "15minutevehicle", "rc-168193-ew-39352-na.txt", FIFTEEN_MINUTE)
    assert count_kind(path) is CountKind.FIFTEEN_MINUTE_VEHICLE
    counts = extract_fifteen_minute_vehicles(path)
    assert len(counts) == 4
    assert (counts[0].lane, counts[0].direction, counts[0].count) == (1, Direction.EAST, 12)
    assert (counts[1].lane, counts[1].direction, counts[1].count) == (2, Direction.WEST, 8)
    assert counts[3].time == time(11, 0)


def test_fifteen_minute_vehicle_direction_mismatch(tmp_path):
    path = _write(tmp_path, "15minutevehicle", "kw-103-sss-21-35.csv", FIFTEEN_MINUTE)
    with pytest.raises(DirectionLenMismatch):
        extract_fifteen_minute_vehicles(path)


def test_header_and_location_checks(tmp_path):
    mismatched = _write(tmp_path, "15minutevehicle", "rc-166905-ew-40972-35.txt", INDIVIDUAL)
    with pytest.raises(LocationHeaderMismatch):
        count_kind(mismatched)

    no_header = _write(tmp_path, "vehicle", "rc-1-ew-2-35.txt", "nothing,here\n1,2\n")
    with pytest.raises(BadHeader):
        count_kind(no_header)

    elsewhere = _write(tmp_path, "misc", "rc-1-ew-2-35.txt", INDIVIDUAL)
    with pytest.raises(BadLocation):
        count_kind(elsewhere)


def test_bicycle_and_pedestrian_extraction(tmp_path):
    text = "Site,Bike lane\nTime,Total,In,Out\n2020-11-21 10:00:00,3,2,1\n2020-11-21 10:15:00,4,4,0\n"
    bike = _write(tmp_path, "15minutebicycle", "vg-156238-ew-4175-na.csv", text)
    counts = extract_fifteen_minute_bicycles(bike)
    assert len(counts) == 2
    assert (counts[0].total, counts[0].indir, counts[0].outdir) == (3, 2, 1)
    assert counts[1].time == time(10, 15)

    ped = _write(tmp_path, "15minutepedestrian", "vg-136271-n-4874-na.csv", text)
    counts = extract_fifteen_minute_pedestrians(ped)
    assert [c.total for c in counts] == [3, 4]
    assert counts[0].indir is None
    assert count_kind(ped) is CountKind.FIFTEEN_MINUTE_PEDESTRIAN


def test_iter_count_files(tmp_path):
    _write(tmp_path, "vehicle", "rc-166905-ew-40972-35.txt", INDIVIDUAL)
    _write(tmp_path, "15minutevehicle", "rc-168193-ew-39352-na.txt", FIFTEEN_MINUTE)
    _write(tmp_path, "vehicle", "notes.md", "ignore me")
    names = [path.name for path in iter_count_files(tmp_path)]
    assert names == ["rc-168193-ew-39352-na.txt", "rc-166905-ew-40972-35.txt"]
