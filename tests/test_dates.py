"""
Date helper tests
"""
import pytest

from coronadb.data.dates import (
    cutoff_non_contiguous_dates,
    date_from_parts,
    fill_missing_dates,
    normalize_date,
    shift_date,
)
from coronadb.domain import DailyRecord


def _series(*dates):
    return [DailyRecord(date=d, cases=i + 1, deaths=0) for i, d in enumerate(dates)]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2020-03-29", "2020-03-29"),
        ("2020-3-9", "2020-03-09"),
        ("29-03-2020", "2020-03-29"),
        ("29.03.2020", "2020-03-29"),
        ("29/03/2020", "2020-03-29"),
        ("1/3/2021", "2021-03-01"),
        (" 2020-12-14 ", "2020-12-14"),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


@pytest.mark.parametrize("value", ["", "yesterday", "2020-02-30", "32.01.2020", "2020/01/01"])
def test_normalize_invalid_date(value):
    with pytest.raises(ValueError):
        normalize_date(value)


def test_date_from_parts_pads():
    assert date_from_parts("2020", "3", "1") == "2020-03-01"
    assert date_from_parts(2020, 12, 14) == "2020-12-14"


def test_shift_date_crosses_month_and_year():
    assert shift_date("2020-02-28", 1) == "2020-02-29"
    assert shift_date("2020-12-31", 1) == "2021-01-01"
    assert shift_date("2021-01-01", -1) == "2020-12-31"
    assert shift_date("2021-01-01", 0) == "2021-01-01"


# ============================================================================
# Trailing snapshot cutoff
# ============================================================================

def test_cutoff_removes_monthly_snapshots():
    records = _series("2020-03-30", "2020-03-31", "2020-04-30", "2020-05-31", "2020-06-30")
    kept, removed = cutoff_non_contiguous_dates(records)
    assert [r.date for r in kept] == ["2020-03-30", "2020-03-31"]
    assert [r.date for r in removed] == ["2020-04-30", "2020-05-31", "2020-06-30"]


def test_cutoff_keeps_contiguous_series():
    records = _series("2020-03-29", "2020-03-30", "2020-03-31")
    kept, removed = cutoff_non_contiguous_dates(records)
    assert kept == records
    assert removed == []


def test_cutoff_ignores_gaps_before_the_tail():
    records = _series("2020-03-01", "2020-03-10", "2020-03-11")
    kept, _ = cutoff_non_contiguous_dates(records)
    assert len(kept) == 3


@pytest.mark.parametrize("dates", [(), ("2020-03-01",)])
def test_cutoff_short_series(dates):
    records = _series(*dates)
    kept, removed = cutoff_non_contiguous_dates(records)
    assert kept == records
    assert removed == []


def test_cutoff_keeps_at_least_one_entry():
    records = _series("2020-01-31", "2020-02-29", "2020-03-31")
    kept, removed = cutoff_non_contiguous_dates(records)
    assert [r.date for r in kept] == ["2020-01-31"]
    assert len(removed) == 2


# ============================================================================
# Gap filling
# ============================================================================

def test_fill_missing_dates_without_gaps():
    records = _series("2020-10-31", "2020-11-01", "2020-11-02")
    assert fill_missing_dates(records) == records


def test_fill_missing_dates_inserts_zero_days():
    records = _series("2020-10-30", "2020-11-02", "2020-11-04")
    filled = fill_missing_dates(records)
    assert [r.date for r in filled] == [
        "2020-10-30", "2020-10-31", "2020-11-01", "2020-11-02", "2020-11-03", "2020-11-04",
    ]
    assert filled[1] == DailyRecord(date="2020-10-31", cases=0, deaths=0)
    assert filled[3].cases == 2


def test_fill_missing_dates_gap_limit():
    records = _series("2020-01-01", "2020-06-01")
    with pytest.raises(ValueError):
        fill_missing_dates(records, max_gap_days=100)
    assert len(fill_missing_dates(records, max_gap_days=200)) == 153
