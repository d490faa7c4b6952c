"""
CoronaDB Date Helpers

Date normalization and series contiguity helpers. All dates leave this module
as ISO-8601 strings (YYYY-MM-DD), which sort lexically.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from coronadb.domain import DailyRecord

ISO_FORMAT = "%Y-%m-%d"

_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_DAY_FIRST_PATTERN = re.compile(r"^(\d{1,2})[-./](\d{1,2})[-./](\d{4})$")


def normalize_date(value: str) -> str:
    """
    Convert a date to YYYY-MM-DD

    Accepts YYYY-MM-DD as well as the day-first forms DD-MM-YYYY,
    DD.MM.YYYY and DD/MM/YYYY.

    Raises:
        ValueError: not a valid date in any of these forms
    """
    value = value.strip()

    match = _ISO_PATTERN.match(value)
    if match:
        year, month, day = match.groups()
    else:
        match = _DAY_FIRST_PATTERN.match(value)
        if not match:
            raise ValueError(f"'{value}' is not a valid date")
        day, month, year = match.groups()

    return date_from_parts(year, month, day)


def date_from_parts(year, month, day) -> str:
    """Build an ISO date from its (string or integer) parts"""
    try:
        return date(int(year), int(month), int(day)).strftime(ISO_FORMAT)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{year}-{month}-{day}' is not a valid date: {e}") from e


def parse_iso(value: str) -> date:
    return datetime.strptime(value, ISO_FORMAT).date()


def shift_date(value: str, days: int) -> str:
    """Move an ISO date by the given number of days"""
    if days == 0:
        return value
    return (parse_iso(value) + timedelta(days=days)).strftime(ISO_FORMAT)


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime(ISO_FORMAT)


def cutoff_non_contiguous_dates(
    records: Sequence[DailyRecord],
) -> Tuple[List[DailyRecord], List[DailyRecord]]:
    """
    Remove stale snapshot entries from the end of a sorted series

    Some exports append monthly snapshot rows after the last real day. Trailing
    entries are removed for as long as the last date is not the day right
    after its predecessor.

    Returns:
        (kept records, removed records)
    """
    kept = list(records)
    removed: List[DailyRecord] = []
    while len(kept) >= 2:
        last = parse_iso(kept[-1].date)
        previous = parse_iso(kept[-2].date)
        if last - previous == timedelta(days=1):
            break
        removed.insert(0, kept.pop())
    return kept, removed


def fill_missing_dates(records: Sequence[DailyRecord], max_gap_days: int = 100) -> List[DailyRecord]:
    """
    Insert zero records for days missing from a sorted series

    Raises:
        ValueError: more than max_gap_days are missing between two entries
    """
    if len(records) <= 1:
        return list(records)

    filled: List[DailyRecord] = [records[0]]
    previous = parse_iso(records[0].date)
    for record in records[1:]:
        current = parse_iso(record.date)
        missing = (current - previous).days - 1
        if missing > max_gap_days:
            raise ValueError(
                f"{missing} days are missing between {previous.strftime(ISO_FORMAT)} and "
                f"{record.date}, at most {max_gap_days} can be filled"
            )
        for offset in range(1, missing + 1):
            day = previous + timedelta(days=offset)
            filled.append(DailyRecord(date=day.strftime(ISO_FORMAT), cases=0, deaths=0))
        filled.append(record)
        previous = current
    return filled
