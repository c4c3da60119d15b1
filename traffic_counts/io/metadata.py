"""Directions and the metadata encoded in count filenames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..errors import FileNameProblem, InvalidFileName


class Direction(Enum):
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @classmethod
    def parse(cls, value: object) -> "Direction":
        text = str(value).strip().lower()
        for direction in cls:
            if text in (direction.value, direction.value[0]):
                return direction
        raise ValueError(f"Invalid direction {value!r}")


@dataclass(frozen=True)
class Directions:
    """Direction of each sensor channel; channel 1 is always present."""

    direction1: Direction
    direction2: Optional[Direction] = None
    direction3: Optional[Direction] = None

    def for_channel(self, channel: int) -> Optional[Direction]:
        if channel == 1:
            return self.direction1
        if channel == 2:
            return self.direction2
        if channel == 3:
            return self.direction3
        return None

    @property
    def channels(self) -> List[int]:
        channels = [1]
        if self.direction2 is not None:
            channels.append(2)
            if self.direction3 is not None:
                channels.append(3)
        return channels

    def __len__(self) -> int:
        return len(self.channels)


_N, _E, _S, _W = Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST

DIRECTION_CODES = {
    "n": Directions(_N),
    "s": Directions(_S),
    "e": Directions(_E),
    "w": Directions(_W),
    "ns": Directions(_N, _S),
    "sn": Directions(_S, _N),
    "ew": Directions(_E, _W),
    "we": Directions(_W, _E),
    "nn": Directions(_N, _N),
    "ss": Directions(_S, _S),
    "ee": Directions(_E, _E),
    "ww": Directions(_W, _W),
    "nnn": Directions(_N, _N, _N),
    "sss": Directions(_S, _S, _S),
    "eee": Directions(_E, _E, _E),
    "www": Directions(_W, _W, _W),
}


@dataclass(frozen=True)
class FieldMetadata:
    technician: str
    recordnum: int
    directions: Directions
    counter_id: str
    speed_limit: Optional[int] = None


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def parse_field_metadata(path: Path) -> FieldMetadata:
    """Parse `tech-recordnum-directions-counterid-speedlimit` from a file name."""
    path = Path(path)
    parts = path.stem.split("-")
    if len(parts) < 5:
        raise InvalidFileName(FileNameProblem.TOO_FEW_PARTS, path)
    if len(parts) > 5:
        raise InvalidFileName(FileNameProblem.TOO_MANY_PARTS, path)

    technician, recordnum, direction_code, counter_id, speed_limit = parts

    # technician initials are letters, never a number
    if _is_int(technician):
        raise InvalidFileName(FileNameProblem.INVALID_TECH, path)
    if not _is_int(recordnum):
        raise InvalidFileName(FileNameProblem.INVALID_RECORD_NUM, path)
    directions = DIRECTION_CODES.get(direction_code.lower())
    if directions is None:
        raise InvalidFileName(FileNameProblem.INVALID_DIRECTIONS, path)
    if not _is_int(counter_id):
        raise InvalidFileName(FileNameProblem.INVALID_COUNTER_ID, path)

    if speed_limit.lower() == "na":
        limit: Optional[int] = None
    elif _is_int(speed_limit):
        limit = int(speed_limit)
    else:
        raise InvalidFileName(FileNameProblem.INVALID_SPEED_LIMIT, path)

    return FieldMetadata(
        technician=technician,
        recordnum=int(recordnum),
        directions=directions,
        counter_id=counter_id,
        speed_limit=limit,
    )
