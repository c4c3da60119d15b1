"""Exceptions raised while importing counts and calculating AADV."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class CountError(Exception):
    """Base exception for all count processing errors."""


class BadIntervalCount(CountError):
    """Raised when the number of rows in a full day does not identify a granularity."""

    def __init__(self, rows: int, recordnum: Optional[int] = None) -> None:
        self.rows = rows
        self.recordnum = recordnum
        super().__init__(f"Unable to determine interval from {rows} rows in first full day")


class InvalidMcd(CountError):
    """Raised when no seasonal factor columns exist for a region code."""

    def __init__(self, mcd: Optional[str]) -> None:
        self.mcd = mcd
        super().__init__(f"Unrecognized region code (mcd) {mcd!r}")


UnrecognizedRegion = InvalidMcd


class DbError(CountError):
    """Raised when a lookup fails, a record is absent or a required field is null."""


class BadVehicleClass(CountError):
    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Invalid vehicle class {value}")


class FileNameProblem(Enum):
    TOO_MANY_PARTS = "too many parts"
    TOO_FEW_PARTS = "too few parts"
    INVALID_TECH = "invalid technician"
    INVALID_RECORD_NUM = "invalid record number"
    INVALID_DIRECTIONS = "invalid directions"
    INVALID_COUNTER_ID = "invalid counter id"
    INVALID_SPEED_LIMIT = "invalid speed limit"


class InvalidFileName(CountError):
    def __init__(self, problem: FileNameProblem, path: Path) -> None:
        self.problem = problem
        self.path = Path(path)
        super().__init__(f"Invalid filename {self.path.name}: {problem.value}")


class BadHeader(CountError):
    """Raised when no recognized header is found near the top of a file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"No recognized header in {self.path}")


class BadLocation(CountError):
    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"{location!r} is not a recognized count directory")


class LocationHeaderMismatch(CountError):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Count type from directory and header differ for {self.path}")


class DirectionLenMismatch(CountError):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Number of count columns does not match directions in filename for {self.path}")


class BadFactorFile(CountError):
    """Raised when a factor CSV lacks the columns identifying a factor row."""

    def __init__(self, path: Path, missing) -> None:
        self.path = Path(path)
        self.missing = sorted(missing)
        super().__init__(f"{self.path.name} is missing factor columns: {', '.join(self.missing)}")
