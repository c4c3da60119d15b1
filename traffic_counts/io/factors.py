"""Reading seasonal and axle factor tables published as CSV."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from ..errors import BadFactorFile

LOGGER = logging.getLogger(__name__)

KEY_COLUMNS = ("year", "month", "fc", "dayofweek")
FACTOR_COLUMNS = ("pafactor", "njfactor", "paaxle", "njaxle")


@dataclass
class SeasonalFactorRow:
    fc: int
    year: int
    month: int
    dayofweek: int
    factors: Dict[str, float] = field(default_factory=dict)


def read_seasonal_factors(path: Path) -> List[SeasonalFactorRow]:
    """Rows of a factor CSV; header names are case-insensitive and empty cells are left out."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.reader(fh)
        try:
            header = [name.strip().lower() for name in next(reader)]
        except StopIteration:
            raise BadFactorFile(path, KEY_COLUMNS) from None

        missing = [name for name in KEY_COLUMNS if name not in header]
        if missing:
            raise BadFactorFile(path, missing)
        positions = {name: header.index(name) for name in KEY_COLUMNS}
        factor_positions = {name: header.index(name) for name in FACTOR_COLUMNS if name in header}
        ignored = set(header) - set(KEY_COLUMNS) - set(FACTOR_COLUMNS)
        if ignored:
            LOGGER.warning("Ignoring factor columns %s in %s", ", ".join(sorted(ignored)), path.name)

        rows: List[SeasonalFactorRow] = []
        for values in reader:
            values = [value.strip() for value in values]
            if not any(values):
                continue
            factors = {
                name: float(values[index])
                for name, index in factor_positions.items()
                if index < len(values) and values[index] != ""
            }
            rows.append(
                SeasonalFactorRow(
                    fc=int(values[positions["fc"]]),
                    year=int(values[positions["year"]]),
                    month=int(values[positions["month"]]),
                    dayofweek=int(values[positions["dayofweek"]]),
                    factors=factors,
                )
            )
    return rows
