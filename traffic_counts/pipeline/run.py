"""Orchestrates importing count files and recalculating their AADV."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import ImportConfig
from ..database.store import CountStore
from ..errors import CountError, InvalidFileName
from ..io.counter import (
    count_kind,
    extract_fifteen_minute_bicycles,
    extract_fifteen_minute_pedestrians,
    extract_fifteen_minute_vehicles,
    extract_individual_vehicles,
    iter_count_files,
)
from ..io.metadata import FieldMetadata, parse_field_metadata
from ..kinds import CountKind
from .aadv import AadvCalculator, determine_date, round_volume
from .checks import CheckResult, run_checks
from .histogram import create_speed_and_class_count
from .pivot import create_non_normal_speed_avg_count, denormalize_vol_count

LOGGER = logging.getLogger(__name__)

BATCH_ERRORS = (CountError, OSError, ValueError, SQLAlchemyError)


class CountProcessor:
    """Helper encapsulating the store, configuration and AADV calculator."""

    def __init__(
        self,
        store: CountStore,
        config: Optional[ImportConfig] = None,
        aadv_calculator: Optional[AadvCalculator] = None,
    ) -> None:
        self.store = store
        self.config = config or ImportConfig()
        self.aadv_calculator = aadv_calculator or AadvCalculator(store)

    @classmethod
    def from_config(cls, config: ImportConfig) -> "CountProcessor":
        store = CountStore.from_url(config.database_url, create_tables=True)
        return cls(store, config)

    def log(self, recordnum: Optional[int], message: str, level: int = logging.INFO) -> None:
        """Log a message and keep it in the import log table."""
        LOGGER.log(level, "%s: %s", recordnum, message)
        self.store.insert_import_log_entry(recordnum, message, logging.getLevelName(level))

    def _import_individual_vehicles(self, path: Path, metadata: FieldMetadata) -> List[date]:
        recordnum = metadata.recordnum
        vehicles = extract_individual_vehicles(path)
        speed_counts, class_counts = create_speed_and_class_count(metadata, vehicles, self.config.interval)
        speed_averages = create_non_normal_speed_avg_count(metadata, vehicles)
        self.store.replace_binned_counts(recordnum, speed_counts, class_counts, speed_averages)
        self.log(recordnum, f"{len(class_counts)} class and speed counts inserted")

        volume = denormalize_vol_count(recordnum, self.store.volume_rows(CountKind.INDIVIDUAL_VEHICLE, recordnum))
        self.store.replace_volume_pivot(recordnum, volume)
        self.log(recordnum, f"{len(volume)} hourly volume rows inserted (tc_volcount table)")
        return [vehicle.date for vehicle in vehicles]

    def _import_fifteen_minute_vehicles(self, path: Path, metadata: FieldMetadata) -> List[date]:
        recordnum = metadata.recordnum
        counts = extract_fifteen_minute_vehicles(path, metadata)
        self.store.replace_fifteen_minute_counts(CountKind.FIFTEEN_MINUTE_VEHICLE, recordnum, counts)
        self.log(recordnum, f"{len(counts)} 15-minute volume counts inserted")

        volume = denormalize_vol_count(recordnum, self.store.volume_rows(CountKind.FIFTEEN_MINUTE_VEHICLE, recordnum))
        self.store.replace_volume_pivot(recordnum, volume)
        self.log(recordnum, f"{len(volume)} hourly volume rows inserted (tc_volcount table)")
        return [count.date for count in counts]

    def _import_in_out_counts(self, kind: CountKind, path: Path, metadata: FieldMetadata) -> List[date]:
        if kind is CountKind.FIFTEEN_MINUTE_BICYCLE:
            counts = extract_fifteen_minute_bicycles(path, metadata)
        else:
            counts = extract_fifteen_minute_pedestrians(path, metadata)
        self.store.replace_fifteen_minute_counts(kind, metadata.recordnum, counts)
        self.log(metadata.recordnum, f"{len(counts)} {kind.value} counts inserted")
        return [count.date for count in counts]

    def calculate_aadv(self, kind: CountKind, recordnum: int) -> Dict[str, int]:
        """Recalculate AADV; a failure is logged and leaves stored AADV untouched."""
        try:
            results = self.aadv_calculator.calculate_and_insert(kind, recordnum)
        except CountError as exc:
            self.log(recordnum, f"Error calculating AADV: {exc}", logging.ERROR)
            return {}
        if results:
            self.log(recordnum, f"AADV calculated: {round_volume(results.get(None, 0.0))}")
        return {
            (direction.value if direction is not None else "all"): round_volume(value)
            for direction, value in results.items()
        }

    def check_data(self, kind: CountKind, recordnum: int) -> List[CheckResult]:
        """Run data checks on the stored count and keep every result in the import log."""
        self.log(recordnum, "Checking data")
        try:
            results = run_checks(self.store, kind, recordnum)
        except (CountError, SQLAlchemyError) as exc:
            self.log(
                recordnum,
                f"An error occurred while checking data: {exc}; warnings likely to be incomplete or incorrect.",
                logging.ERROR,
            )
            return []
        for result in results:
            self.log(recordnum, result.message, result.level)
        return results

    def process(self, path: Path) -> Dict[str, object]:
        path = Path(path)
        kind = count_kind(path)
        metadata = parse_field_metadata(path)
        recordnum = metadata.recordnum
        LOGGER.info("Processing %s count %s", kind.value, recordnum)

        if kind is CountKind.INDIVIDUAL_VEHICLE:
            dates = self._import_individual_vehicles(path, metadata)
        elif kind is CountKind.FIFTEEN_MINUTE_VEHICLE:
            dates = self._import_fifteen_minute_vehicles(path, metadata)
        else:
            dates = self._import_in_out_counts(kind, path, metadata)

        self.store.update_metadata(recordnum, metadata)
        self.log(recordnum, "Metadata updated (tc_header table)")

        set_date = determine_date(dates)
        if set_date is not None:
            self.store.set_annual_average_date(recordnum, set_date, kind)

        aadv = self.calculate_aadv(kind, recordnum) if self.config.compute_aadv else {}
        self.check_data(kind, recordnum)
        return {
            "recordnum": recordnum,
            "kind": kind.value,
            "days": len(set(dates)),
            "set_date": set_date.isoformat() if set_date else None,
            "aadv": aadv,
        }

    def record_failure(self, path: Path, error: Exception) -> None:
        try:
            recordnum: Optional[int] = parse_field_metadata(path).recordnum
        except InvalidFileName:
            recordnum = None
        LOGGER.error("%s: %s", recordnum if recordnum is not None else Path(path).name, error)
        try:
            self.store.insert_import_log_entry(recordnum, str(error), "ERROR")
        except SQLAlchemyError:
            LOGGER.exception("Unable to write import log entry for %s", path)


def process_all(data_root: Path, processor: CountProcessor) -> Dict[str, Dict[str, object]]:
    """Import every count file under ``data_root``; a bad file never stops the batch."""
    results: Dict[str, Dict[str, object]] = {}
    for path in iter_count_files(data_root):
        try:
            results[path.name] = processor.process(path)
        except BATCH_ERRORS as exc:
            processor.record_failure(path, exc)
    LOGGER.info("Imported %d count files from %s", len(results), data_root)
    return results
