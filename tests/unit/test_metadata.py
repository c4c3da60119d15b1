from pathlib import Path

import pytest

from traffic_counts.errors import FileNameProblem, InvalidFileName
from traffic_counts.io.metadata import Direction, Directions, parse_field_metadata


def test_parse_two_direction_filename():
    metadata = parse_field_metadata(Path("some/path/rc-166905-ew-40972-35.txt"))
    assert metadata.technician == "rc"
    assert metadata.recordnum == 166905
    assert metadata.directions == Directions(Direction.EAST, Direction.WEST)
    assert metadata.counter_id == "40972"
    assert metadata.speed_limit == 35


def test_parse_single_and_three_direction_filenames():
    assert parse_field_metadata(Path("rc-166905-e-40972-35.txt")).directions == Directions(Direction.EAST)
    three = parse_field_metadata(Path("kw-101-eee-21-35.csv")).directions
    assert three == Directions(Direction.EAST, Direction.EAST, Direction.EAST)
    assert three.channels == [1, 2, 3]
    assert three.for_channel(3) is Direction.EAST
    assert three.for_channel(4) is None


def test_na_speed_limit():
    assert parse_field_metadata(Path("rc-168193-ew-39352-na.txt")).speed_limit is None


@pytest.mark.parametrize(
    "name, problem",
    [
        ("rc-166905-ew-40972.txt", FileNameProblem.TOO_FEW_PARTS),
        ("rc-166905-ew-40972-35-x.txt", FileNameProblem.TOO_MANY_PARTS),
        ("12-166905-ew-40972-35.txt", FileNameProblem.INVALID_TECH),
        ("rc-abc-ew-40972-35.txt", FileNameProblem.INVALID_RECORD_NUM),
        ("rc-166905-ne-40972-35.txt", FileNameProblem.INVALID_DIRECTIONS),
        ("rc-166905-ew-abc-35.txt", FileNameProblem.INVALID_COUNTER_ID),
        ("rc-166905-ew-40972-fast.txt", FileNameProblem.INVALID_SPEED_LIMIT),
    ],
)
def test_invalid_filenames(name, problem):
    with pytest.raises(InvalidFileName) as excinfo:
        parse_field_metadata(Path(name))
    assert excinfo.value.problem is problem


def test_direction_parse():
    assert Direction.parse("East") is Direction.EAST
    assert Direction.parse("s") is Direction.SOUTH
    with pytest.raises(ValueError):
        Direction.parse("both")
