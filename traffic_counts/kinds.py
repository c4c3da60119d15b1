"""The fixed set of count kinds handled by the importer."""

from __future__ import annotations

from enum import Enum


class CountKind(Enum):
    """Count kinds, valued by the input directory name that holds them."""

    FIFTEEN_MINUTE_BICYCLE = "15minutebicycle"
    FIFTEEN_MINUTE_PEDESTRIAN = "15minutepedestrian"
    FIFTEEN_MINUTE_VEHICLE = "15minutevehicle"
    INDIVIDUAL_VEHICLE = "vehicle"

    @classmethod
    def from_name(cls, name: str) -> "CountKind":
        """Accept either the directory name or the member name (case-insensitive)."""
        value = name.strip().lower()
        for kind in cls:
            if value in (kind.value, kind.name.lower(), kind.name.lower().replace("_", "-")):
                return kind
        raise ValueError(f"Unknown count kind {name!r}")

    @property
    def table(self) -> str:
        """Table holding the binned rows that AADV is computed from."""
        return _TABLES[self]

    @property
    def recordnum_field(self) -> str:
        return "dvrpcnum" if self.has_in_out_columns else "recordnum"

    @property
    def total_field(self) -> str:
        return "volcount" if self is CountKind.FIFTEEN_MINUTE_VEHICLE else "total"

    @property
    def has_in_out_columns(self) -> bool:
        """Bicycle and pedestrian counts store directions as in/out columns."""
        return self in (CountKind.FIFTEEN_MINUTE_BICYCLE, CountKind.FIFTEEN_MINUTE_PEDESTRIAN)

    @property
    def factor_source(self) -> str:
        return _FACTOR_SOURCES[self]

    @property
    def uses_axle_factor(self) -> bool:
        return self is CountKind.FIFTEEN_MINUTE_VEHICLE


_TABLES = {
    CountKind.FIFTEEN_MINUTE_BICYCLE: "tc_bikecount",
    CountKind.FIFTEEN_MINUTE_PEDESTRIAN: "tc_pedcount",
    CountKind.FIFTEEN_MINUTE_VEHICLE: "tc_15minvolcount",
    CountKind.INDIVIDUAL_VEHICLE: "tc_clacount",
}

_FACTOR_SOURCES = {
    CountKind.FIFTEEN_MINUTE_BICYCLE: "bicycle",
    CountKind.FIFTEEN_MINUTE_PEDESTRIAN: "pedestrian",
    CountKind.FIFTEEN_MINUTE_VEHICLE: "seasonal",
    CountKind.INDIVIDUAL_VEHICLE: "seasonal",
}
