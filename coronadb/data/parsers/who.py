"""
CoronaDB WHO Parser

Daily CSV of the World Health Organization, countries are identified by their
ISO alpha-2 code.
"""
import re
from typing import Optional, Sequence

from coronadb.core import RecordParseError
from coronadb.data.dates import shift_date
from coronadb.domain import CountryIdentity, DailyRecord

from .base import BaseCsvParser, parse_count

WHO_HEADERS = (
    "Date_reported",
    "Country_code",
    "Country",
    "WHO_region",
    "New_cases",
    "Cumulative_cases",
    "New_deaths",
    "Cumulative_deaths",
)

IDX_DATE = 0
IDX_ALPHA2 = 1
IDX_NAME = 2
IDX_REGION = 3
IDX_CASES = 4
IDX_DEATHS = 6

_FOOTNOTE = re.compile(r"(\[1\])+$")


class WhoParser(BaseCsvParser):
    """
    Parser of the WHO CSV

    WHO dates its reports one day earlier than the other sources date the same
    numbers, dates are moved by settings.who_date_offset_days.
    """

    name = "WHO"
    expected_headers = WHO_HEADERS
    lookup_by = "alpha2"

    def check_length(self, fields: Sequence[str], line: int) -> None:
        if len(fields) != len(WHO_HEADERS):
            raise RecordParseError(
                line, f"expected eight data elements, but found {len(fields)}"
            )

    def row_key(self, fields: Sequence[str]) -> Optional[str]:
        alpha2 = fields[IDX_ALPHA2]
        if not alpha2:
            self.skip("empty country key")
            return None
        return alpha2

    def row_identity(self, key: str, fields: Sequence[str]) -> CountryIdentity:
        return CountryIdentity(
            name=_FOOTNOTE.sub("", fields[IDX_NAME]),
            iso_alpha2=key,
            continent=fields[IDX_REGION],
        )

    def parse_date_field(self, value: str) -> str:
        return shift_date(super().parse_date_field(value), self.settings.who_date_offset_days)

    def parse_row(self, fields: Sequence[str]) -> DailyRecord:
        return DailyRecord(
            date=self.parse_date_field(fields[IDX_DATE]),
            cases=parse_count(fields[IDX_CASES]),
            deaths=parse_count(fields[IDX_DEATHS]),
        )
