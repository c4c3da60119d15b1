"""SQLAlchemy-backed persistence for counts, factors and AADV results."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from sqlalchemy import delete, func, select, update

from ..errors import DbError
from ..io.counter import FifteenMinuteBicycle, FifteenMinutePedestrian, FifteenMinuteVehicle
from ..io.factors import SeasonalFactorRow
from ..io.metadata import Direction, FieldMetadata
from ..kinds import CountKind
from ..pipeline.aadv import AadvResult, day_of_week_number, round_volume
from ..pipeline.full_days import CountRow
from ..pipeline.histogram import SpeedRangeCount, VehicleClassCount
from ..pipeline.pivot import NonNormalAvgSpeedCount, NonNormalCountKey, NonNormalVolCount, VolumeRow, sorted_rows
from .database import create_db_engine, create_session_factory, init_db
from .models import (
    Aadv,
    BicycleCount,
    BicycleFactor,
    ClassCount,
    CountTypeFactor,
    ExcludedDay,
    FifteenMinuteVolumeCount,
    Header,
    ImportLogEntry,
    PedestrianCount,
    PedestrianFactor,
    SeasonalFactor,
    SpeedCount,
    SpeedSummary,
    VolumeCount,
)

LOGGER = logging.getLogger(__name__)

# VehicleClassCount field -> tc_clacount column
CLASS_COLUMNS = {
    "c1": "bikes",
    "c2": "cars_and_tlrs",
    "c3": "ax2_long",
    "c4": "buses",
    "c5": "ax2_6_tire",
    "c6": "ax3_single",
    "c7": "ax4_single",
    "c8": "lt_5_ax_double",
    "c9": "ax5_double",
    "c10": "gt_5_ax_double",
    "c11": "lt_6_ax_multi",
    "c12": "ax6_multi",
    "c13": "gt_6_ax_multi",
    "c15": "unclassified",
}

COUNT_MODELS = {
    CountKind.FIFTEEN_MINUTE_BICYCLE: BicycleCount,
    CountKind.FIFTEEN_MINUTE_PEDESTRIAN: PedestrianCount,
    CountKind.FIFTEEN_MINUTE_VEHICLE: FifteenMinuteVolumeCount,
    CountKind.INDIVIDUAL_VEHICLE: ClassCount,
}


@dataclass
class CountHeader:
    recordnum: int
    mcd: Optional[str] = None
    fc: Optional[int] = None
    count_type: Optional[int] = None
    bikepedgroup: Optional[str] = None
    indir: Optional[str] = None
    outdir: Optional[str] = None


def _direction(value: Optional[str]) -> Optional[Direction]:
    if value is None or value == "":
        return None
    try:
        return Direction.parse(value)
    except ValueError:
        raise DbError(f"Invalid direction {value!r} stored in count table") from None


def _direction_value(direction: Optional[Direction]) -> Optional[str]:
    return direction.value if direction is not None else None


class CountStore:
    """Reads and replaces everything stored for a count record."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    @classmethod
    def from_url(cls, url: Optional[str] = None, create_tables: bool = False) -> "CountStore":
        engine = create_db_engine(url)
        if create_tables:
            init_db(engine)
        return cls(create_session_factory(engine))

    @contextmanager
    def session_scope(self) -> Iterator:
        """One transaction: committed on success, rolled back on any error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # --- reads ---

    def header(self, recordnum: int) -> CountHeader:
        with self.session_scope() as session:
            row = session.get(Header, recordnum)
            if row is None:
                raise DbError(f"{recordnum} not found in tc_header table")
            return CountHeader(
                recordnum=row.recordnum,
                mcd=row.mcd,
                fc=row.fc,
                count_type=row.count_type,
                bikepedgroup=row.bikepedgroup,
                indir=row.indir,
                outdir=row.outdir,
            )

    def count_rows(self, kind: CountKind, recordnum: int) -> List[CountRow]:
        """Stored binned rows for AADV, ordered by date and time."""
        model = COUNT_MODELS[kind]
        recordnum_column = getattr(model, kind.recordnum_field)
        stmt = (
            select(model)
            .where(recordnum_column == recordnum)
            .order_by(model.countdate, model.counttime)
        )
        with self.session_scope() as session:
            rows = session.execute(stmt).scalars().all()
            if kind.has_in_out_columns:
                return [
                    CountRow(row.countdate, row.counttime, row.total, None, row.incount, row.outcount)
                    for row in rows
                ]
            direction_field = "cntdir" if kind is CountKind.FIFTEEN_MINUTE_VEHICLE else "ctdir"
            return [
                CountRow(
                    row.countdate,
                    row.counttime,
                    getattr(row, kind.total_field) or 0,
                    _direction(getattr(row, direction_field)),
                )
                for row in rows
            ]

    def volume_rows(self, kind: CountKind, recordnum: int) -> List[VolumeRow]:
        if kind is CountKind.INDIVIDUAL_VEHICLE:
            model, volume_field, direction_field = ClassCount, "total", "ctdir"
        elif kind is CountKind.FIFTEEN_MINUTE_VEHICLE:
            model, volume_field, direction_field = FifteenMinuteVolumeCount, "volcount", "cntdir"
        else:
            raise ValueError(f"No hourly volume pivot for {kind.value} counts")
        stmt = (
            select(model)
            .where(model.recordnum == recordnum)
            .order_by(model.countdate, model.counttime)
        )
        with self.session_scope() as session:
            return [
                VolumeRow(
                    row.countdate,
                    row.counttime,
                    getattr(row, volume_field) or 0,
                    _direction(getattr(row, direction_field)),
                    row.countlane,
                )
                for row in session.execute(stmt).scalars()
            ]

    def class_share_totals(self, recordnum: int) -> Tuple[int, int, int]:
        """Summed (class 2, unclassified, total) vehicles of a class count."""
        stmt = select(
            func.coalesce(func.sum(ClassCount.cars_and_tlrs), 0),
            func.coalesce(func.sum(ClassCount.unclassified), 0),
            func.coalesce(func.sum(ClassCount.total), 0),
        ).where(ClassCount.recordnum == recordnum)
        with self.session_scope() as session:
            c2, c15, total = session.execute(stmt).one()
        return int(c2), int(c15), int(total)

    def excluded_days(self) -> Set[date]:
        with self.session_scope() as session:
            return set(session.execute(select(ExcludedDay.dt)).scalars())

    def lookup_factor(self, fc: Optional[int], day: date, column: str) -> float:
        """A seasonal or axle factor column of tc_factor for a functional class and day."""
        stmt = select(SeasonalFactor).where(
            SeasonalFactor.fc == fc,
            SeasonalFactor.year == day.year,
            SeasonalFactor.month == day.month,
            SeasonalFactor.dayofweek == day_of_week_number(day),
        )
        with self.session_scope() as session:
            row = session.execute(stmt).scalars().first()
            value = getattr(row, column) if row is not None else None
        if value is None:
            raise DbError(f"No {column} in tc_factor for fc {fc} on {day.isoformat()}")
        return float(value)

    def bicycle_factor(self, group: Optional[str], day: date) -> float:
        stmt = select(BicycleFactor.factor).where(
            BicycleFactor.type == group,
            BicycleFactor.year == day.year,
            BicycleFactor.monthnum == day.month,
            BicycleFactor.dayofweeknum == day_of_week_number(day),
        )
        with self.session_scope() as session:
            value = session.execute(stmt).scalars().first()
        if value is None:
            raise DbError(f"No factor in tc_bikefactor for group {group!r} on {day.isoformat()}")
        return float(value)

    def pedestrian_factor(self, day: date) -> float:
        stmt = select(PedestrianFactor.factor).where(PedestrianFactor.month == day.month)
        with self.session_scope() as session:
            value = session.execute(stmt).scalars().first()
        if value is None:
            raise DbError(f"No factor in tc_pedfactor for month {day.month}")
        return float(value)

    def equipment_factor(self, count_type: Optional[int]) -> Optional[float]:
        if count_type is None:
            return None
        with self.session_scope() as session:
            row = session.get(CountTypeFactor, count_type)
            if row is None or row.factor2 is None:
                return None
            return float(row.factor2)

    def aadv(self, recordnum: int) -> Dict[Optional[Direction], int]:
        """Most recently calculated AADV rows for a record."""
        with self.session_scope() as session:
            latest = session.execute(
                select(Aadv.date_calculated)
                .where(Aadv.recordnum == recordnum)
                .order_by(Aadv.date_calculated.desc())
            ).scalars().first()
            if latest is None:
                return {}
            rows = session.execute(
                select(Aadv).where(Aadv.recordnum == recordnum, Aadv.date_calculated == latest)
            ).scalars()
            return {_direction(row.direction): row.aadv for row in rows}

    def import_log(self, recordnum: Optional[int] = None) -> List[ImportLogEntry]:
        stmt = select(ImportLogEntry).order_by(ImportLogEntry.id.desc())
        if recordnum is not None:
            stmt = stmt.where(ImportLogEntry.recordnum == recordnum)
        with self.session_scope() as session:
            return list(session.execute(stmt).scalars())

    # --- writes ---

    def replace_aadv(self, recordnum: int, results: AadvResult, today: date) -> None:
        """Replace the AADV rows calculated today for a record, all or nothing."""
        with self.session_scope() as session:
            session.execute(
                delete(Aadv).where(Aadv.recordnum == recordnum, Aadv.date_calculated == today)
            )
            for direction, value in results.items():
                session.add(
                    Aadv(
                        recordnum=recordnum,
                        aadv=round_volume(value),
                        direction=_direction_value(direction),
                        date_calculated=today,
                    )
                )
            if None in results:
                session.execute(
                    update(Header)
                    .where(Header.recordnum == recordnum)
                    .values(aadv=round_volume(results[None]))
                )

    def replace_binned_counts(
        self,
        recordnum: int,
        speed_counts: Iterable[SpeedRangeCount],
        class_counts: Iterable[VehicleClassCount],
        speed_averages: Dict[NonNormalCountKey, NonNormalAvgSpeedCount],
    ) -> None:
        """Replace class, speed and pivot rows of an individual vehicle count."""
        with self.session_scope() as session:
            for model in (ClassCount, SpeedCount, SpeedSummary, VolumeCount):
                session.execute(delete(model).where(model.recordnum == recordnum))
            for count in class_counts:
                columns = {CLASS_COLUMNS[name]: value for name, value in count.counts().items()}
                session.add(
                    ClassCount(
                        recordnum=recordnum,
                        countdate=count.timestamp.date(),
                        counttime=count.timestamp,
                        countlane=count.lane,
                        ctdir=_direction_value(count.direction),
                        total=count.total,
                        **columns,
                    )
                )
            for count in speed_counts:
                session.add(
                    SpeedCount(
                        recordnum=recordnum,
                        countdate=count.timestamp.date(),
                        counttime=count.timestamp,
                        countlane=count.lane,
                        ctdir=_direction_value(count.direction),
                        total=count.total,
                        **count.counts(),
                    )
                )
            for key, row in sorted_rows(speed_averages):
                session.add(
                    SpeedSummary(
                        recordnum=recordnum,
                        countdate=key.date,
                        ctdir=_direction_value(key.direction),
                        countlane=key.lane,
                        **row.columns(),
                    )
                )
        LOGGER.debug("%s: replaced class, speed and speed summary rows", recordnum)

    def replace_volume_pivot(self, recordnum: int, counts: Dict[NonNormalCountKey, NonNormalVolCount]) -> None:
        with self.session_scope() as session:
            session.execute(delete(VolumeCount).where(VolumeCount.recordnum == recordnum))
            for key, row in sorted_rows(counts):
                session.add(
                    VolumeCount(
                        recordnum=recordnum,
                        countdate=key.date,
                        totalcount=row.total,
                        cntdir=_direction_value(key.direction),
                        countlane=key.lane,
                        **row.columns(),
                    )
                )

    def replace_fifteen_minute_counts(self, kind: CountKind, recordnum: int, counts: Iterable) -> None:
        """Replace pre-binned 15-minute rows (vehicle, bicycle or pedestrian)."""
        model = COUNT_MODELS[kind]
        if model is ClassCount:
            raise ValueError("Individual vehicle counts are stored with replace_binned_counts")
        recordnum_column = getattr(model, kind.recordnum_field)
        with self.session_scope() as session:
            session.execute(delete(model).where(recordnum_column == recordnum))
            for count in counts:
                counttime = datetime.combine(count.date, count.time)
                if isinstance(count, FifteenMinuteVehicle):
                    session.add(
                        FifteenMinuteVolumeCount(
                            recordnum=recordnum,
                            countdate=count.date,
                            counttime=counttime,
                            volcount=count.count,
                            cntdir=_direction_value(count.direction),
                            countlane=count.lane,
                        )
                    )
                elif isinstance(count, (FifteenMinuteBicycle, FifteenMinutePedestrian)):
                    session.add(
                        model(
                            dvrpcnum=recordnum,
                            countdate=count.date,
                            counttime=counttime,
                            total=count.total,
                            incount=count.indir,
                            outcount=count.outdir,
                        )
                    )
                else:
                    raise TypeError(f"Unsupported count record {type(count).__name__}")

    def update_metadata(self, recordnum: int, metadata: FieldMetadata, today: Optional[date] = None) -> None:
        with self.session_scope() as session:
            result = session.execute(
                update(Header)
                .where(Header.recordnum == recordnum)
                .values(
                    importdatadate=today or date.today(),
                    status="imported",
                    counterid=metadata.counter_id,
                    speedlimit=metadata.speed_limit,
                )
            )
            if result.rowcount == 0:
                raise DbError(f"{recordnum} not found in tc_header table")

    def set_annual_average_date(self, recordnum: int, day: date, kind: CountKind) -> None:
        """Record the date the annual average applies to."""
        with self.session_scope() as session:
            if kind is CountKind.FIFTEEN_MINUTE_VEHICLE:
                session.execute(
                    update(VolumeCount)
                    .where(VolumeCount.recordnum == recordnum, VolumeCount.countdate == day)
                    .values(setflag=-1)
                )
            session.execute(update(Header).where(Header.recordnum == recordnum).values(set_date=day))

    def insert_import_log_entry(self, recordnum: Optional[int], message: str, level: str) -> None:
        with self.session_scope() as session:
            session.add(ImportLogEntry(recordnum=recordnum, message=message, log_level=level))

    def upsert_seasonal_factors(self, rows: Iterable[SeasonalFactorRow]) -> Tuple[int, int]:
        """Insert factor rows, or update the given columns of rows already present.

        Rows are keyed by (fc, year, month, dayofweek). Returns (inserted, updated).
        """
        inserted = updated = 0
        with self.session_scope() as session:
            for row in rows:
                existing = session.execute(
                    select(SeasonalFactor).where(
                        SeasonalFactor.fc == row.fc,
                        SeasonalFactor.year == row.year,
                        SeasonalFactor.month == row.month,
                        SeasonalFactor.dayofweek == row.dayofweek,
                    )
                ).scalars().first()
                if existing is None:
                    session.add(
                        SeasonalFactor(
                            fc=row.fc, year=row.year, month=row.month, dayofweek=row.dayofweek, **row.factors
                        )
                    )
                    session.flush()
                    inserted += 1
                else:
                    for name, value in row.factors.items():
                        setattr(existing, name, value)
                    updated += 1
        LOGGER.info("tc_factor: %d rows inserted, %d updated", inserted, updated)
        return inserted, updated
