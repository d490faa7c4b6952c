"""
CoronaDB Format Detector

Classifies a CSV file by the signature of its header line
"""
from enum import Enum as PyEnum
from pathlib import Path
from typing import Tuple, Union

from coronadb.core import InputFileError, get_logger

logger = get_logger(__name__)


class CsvFormat(str, PyEnum):
    """Known CSV schemas"""
    ECDC = "ecdc"                          # legacy daily schema
    OWID = "owid"                          # wide per-country-per-day schema
    OWID_ETL_COMPACT = "owid_etl_compact"  # compact wide schema
    WHO = "who"                            # health agency schema
    UNRECOGNIZED = "unrecognized"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    CsvFormat.ECDC: "ECDC",
    CsvFormat.OWID: "Our World In Data",
    CsvFormat.OWID_ETL_COMPACT: "Our World In Data (ETL, compact)",
    CsvFormat.WHO: "WHO",
    CsvFormat.UNRECOGNIZED: "unrecognized",
}

# Checked in this order, a format matches when its line contains every substring
_SIGNATURES: Tuple[Tuple[CsvFormat, Tuple[str, ...]], ...] = (
    (CsvFormat.ECDC, ("dateRep,day,month,year,cases,deaths",)),
    (CsvFormat.OWID, ("iso_code,continent,location,date,", ",new_cases,", ",new_deaths,")),
    (CsvFormat.OWID_ETL_COMPACT, ("country,date,total_cases,new_cases,", ",new_deaths,", ",code,continent,")),
    (CsvFormat.WHO, ("Date_reported,Country_code,Country,WHO_region",)),
)


def detect_format_of_line(line: str) -> CsvFormat:
    """Classify a header line"""
    line = line.lstrip("\ufeff")
    for csv_format, needles in _SIGNATURES:
        if all(needle in line for needle in needles):
            return csv_format
    return CsvFormat.UNRECOGNIZED


def detect_format(path: Union[str, Path]) -> CsvFormat:
    """
    Detect the CSV schema of a file

    Only the first line is read, a UTF-8 byte order mark is skipped.

    Args:
        path: CSV file

    Returns:
        CsvFormat: detected schema, CsvFormat.UNRECOGNIZED if none matches

    Raises:
        InputFileError: the file cannot be opened or read
    """
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            first_line = f.readline()
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(str(path), str(e)) from e

    csv_format = detect_format_of_line(first_line)
    logger.debug(f"Detected format of {path}: {csv_format.value}")
    return csv_format
