"""
CoronaDB Our World In Data Parser

Wide CSV with one row per country and day and dozens of indicator columns.
Aggregates (continents, income groups, the world) use "OWID_" keys.
"""
from typing import Optional, Sequence

from coronadb.core import HeaderMismatchError, RecordParseError
from coronadb.domain import CountryIdentity, DailyRecord

from .base import BaseCsvParser, parse_count

OWID_HEADERS = (
    "iso_code",
    "continent",
    "location",
    "date",
    "total_cases",
    "new_cases",
    "new_cases_smoothed",
    "total_deaths",
    "new_deaths",
)

AGGREGATE_PREFIX = "OWID_"

IDX_ISO3 = 0
IDX_CONTINENT = 1
IDX_NAME = 2
IDX_DATE = 3
IDX_CASES = 5
IDX_DEATHS = 8


class OwidParser(BaseCsvParser):
    """Parser of the OWID CSV, countries are identified by ISO alpha-3 code"""

    name = "OWID"
    expected_headers = OWID_HEADERS
    lookup_by = "alpha3"

    def check_headers(self, headers: Sequence[str]) -> None:
        """
        Require the leading columns, followed by at least one indicator column

        Indicator columns keep being added, only the leading ones are fixed.
        OWID files always carry indicators after new_deaths, and format
        detection relies on that.
        """
        if list(headers[:len(OWID_HEADERS)]) != list(OWID_HEADERS):
            raise HeaderMismatchError(self.name, headers)
        if len(headers) == len(OWID_HEADERS):
            raise HeaderMismatchError(self.name, headers, "indicator columns after new_deaths are missing")

    def check_length(self, fields: Sequence[str], line: int) -> None:
        if len(fields) < len(OWID_HEADERS):
            raise RecordParseError(
                line, f"expected at least {len(OWID_HEADERS)} data elements, but found {len(fields)}"
            )

    def row_key(self, fields: Sequence[str]) -> Optional[str]:
        iso3 = fields[IDX_ISO3]
        if iso3.startswith(AGGREGATE_PREFIX):
            self.skip("aggregate")
            return None
        if not iso3:
            self.skip("empty country key")
            return None
        return iso3

    def row_identity(self, key: str, fields: Sequence[str]) -> CountryIdentity:
        return CountryIdentity(
            name=fields[IDX_NAME],
            iso_alpha3=key,
            continent=fields[IDX_CONTINENT],
        )

    def parse_row(self, fields: Sequence[str]) -> DailyRecord:
        return DailyRecord(
            date=self.parse_date_field(fields[IDX_DATE]),
            cases=parse_count(fields[IDX_CASES]),
            deaths=parse_count(fields[IDX_DEATHS]),
        )
