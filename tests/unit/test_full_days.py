from datetime import date, datetime, time, timedelta

import pytest

from traffic_counts.errors import BadIntervalCount
from traffic_counts.io.metadata import Direction
from traffic_counts.pipeline.full_days import (
    CountRow,
    combine_date_time,
    drop_excluded_days,
    get_full_dates,
    in_out_totals_by_date,
    totals_by_date,
)


def _series(start: datetime, end: datetime, step_minutes: int, repeat: int = 1):
    values = []
    current = start
    while current <= end:
        values.extend([current] * repeat)
        current += timedelta(minutes=step_minutes)
    return values


def test_empty_input_has_no_full_days():
    assert get_full_dates([]) == []


def test_single_full_hourly_day():
    observations = _series(datetime(2023, 11, 6, 10, 0), datetime(2023, 11, 8, 9, 0), 60)
    assert get_full_dates(observations) == [date(2023, 11, 7)]


def test_full_days_span_inclusive_range_fifteen_minute():
    observations = _series(datetime(2023, 11, 6, 11, 45), datetime(2023, 11, 10, 8, 0), 15, repeat=2)
    assert get_full_dates(observations) == [date(2023, 11, 7), date(2023, 11, 8), date(2023, 11, 9)]


def test_count_ending_at_last_interval_keeps_last_day():
    observations = _series(datetime(2023, 11, 7, 0, 0), datetime(2023, 11, 8, 23, 45), 15)
    assert get_full_dates(observations) == [date(2023, 11, 7), date(2023, 11, 8)]


def test_unrecognized_row_count_raises():
    observations = _series(datetime(2023, 11, 6, 10, 0), datetime(2023, 11, 8, 9, 0), 20)
    with pytest.raises(BadIntervalCount) as excinfo:
        get_full_dates(observations, recordnum=12345)
    assert excinfo.value.rows == 72
    assert excinfo.value.recordnum == 12345


def test_three_lane_counts_use_distinct_timestamps():
    fifteen = _series(datetime(2023, 11, 6, 10, 15), datetime(2023, 11, 9, 9, 45), 15, repeat=3)
    assert get_full_dates(fifteen) == [date(2023, 11, 7), date(2023, 11, 8)]

    hourly = _series(datetime(2023, 11, 6, 10, 0), datetime(2023, 11, 8, 23, 0), 60, repeat=3)
    assert get_full_dates(hourly) == [date(2023, 11, 7), date(2023, 11, 8)]


def test_uneven_rows_per_timestamp_still_raise():
    observations = _series(datetime(2023, 11, 6, 10, 0), datetime(2023, 11, 8, 9, 0), 60, repeat=3)
    observations.append(datetime(2023, 11, 7, 5, 0))
    with pytest.raises(BadIntervalCount) as excinfo:
        get_full_dates(observations)
    assert excinfo.value.rows == 73


def test_day_missing_its_midnight_interval_is_not_full():
    observations = _series(datetime(2023, 11, 7, 0, 15), datetime(2023, 11, 9, 23, 45), 15)
    assert get_full_dates(observations) == [date(2023, 11, 8), date(2023, 11, 9)]


def test_combine_uses_only_time_of_legacy_timestamp():
    combined = combine_date_time(date(2023, 11, 7), datetime(1899, 12, 30, 13, 15))
    assert combined == datetime(2023, 11, 7, 13, 15)
    assert combine_date_time(date(2023, 11, 7), time(1, 0)) == datetime(2023, 11, 7, 1, 0)


def test_totals_by_date_adds_aggregate_and_skips_partial_days():
    rows = [
        CountRow(date(2023, 11, 6), time(23, 0), 5, Direction.EAST),
        CountRow(date(2023, 11, 7), time(1, 0), 10, Direction.EAST),
        CountRow(date(2023, 11, 7), time(1, 0), 4, Direction.WEST),
        CountRow(date(2023, 11, 7), time(2, 0), 6, Direction.EAST),
    ]
    totals = totals_by_date(rows, [date(2023, 11, 7)])
    assert totals == {
        (date(2023, 11, 7), Direction.EAST): 16,
        (date(2023, 11, 7), Direction.WEST): 4,
        (date(2023, 11, 7), None): 20,
    }


def test_totals_without_direction_only_aggregate():
    rows = [CountRow(date(2023, 11, 7), time(1, 0), 10)]
    assert totals_by_date(rows, [date(2023, 11, 7)]) == {(date(2023, 11, 7), None): 10}


def test_in_out_totals_and_excluded_days():
    rows = [
        CountRow(date(2020, 11, 23), time(8, 0), 7, None, 5, 2),
        CountRow(date(2020, 11, 26), time(8, 0), 3, None, 1, 2),
    ]
    totals = in_out_totals_by_date(rows, Direction.EAST, Direction.WEST, [date(2020, 11, 23), date(2020, 11, 26)])
    assert totals[(date(2020, 11, 23), Direction.EAST)] == 5
    assert totals[(date(2020, 11, 23), Direction.WEST)] == 2
    assert totals[(date(2020, 11, 23), None)] == 7

    kept = drop_excluded_days(totals, {date(2020, 11, 26)})
    assert {day for day, _ in kept} == {date(2020, 11, 23)}
