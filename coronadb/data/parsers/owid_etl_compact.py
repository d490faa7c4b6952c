"""
CoronaDB Our World In Data ETL Parser

Compact CSV of the OWID ETL pipeline, identified by the country name first and
an ISO alpha-3 code in a later "code" column. The export appends monthly
snapshot rows after the last daily row of some countries, those are removed.
"""
from typing import List, Optional, Sequence

from coronadb.core import HeaderMismatchError, RecordParseError
from coronadb.data.dates import cutoff_non_contiguous_dates, today_iso
from coronadb.domain import CountryIdentity, DailyRecord

from .base import BaseCsvParser, CountryBatch, parse_count

OWID_ETL_COMPACT_HEADERS = (
    "country",
    "date",
    "total_cases",
    "new_cases",
    "new_cases_smoothed",
    "total_cases_per_million",
    "new_cases_per_million",
    "new_cases_smoothed_per_million",
    "total_deaths",
    "new_deaths",
)

AGGREGATE_PREFIX = "OWID_"

# Kosovo has no ISO code, OWID and the gazetteer use different placeholders
CODE_REPLACEMENTS = {"OWID_KOS": "XKX"}

IDX_NAME = 0
IDX_DATE = 1
IDX_CASES = 3
IDX_DEATHS = 9


class OwidEtlCompactParser(BaseCsvParser):
    """Parser of the compact OWID ETL CSV"""

    name = "OWID ETL compact"
    expected_headers = OWID_ETL_COMPACT_HEADERS
    lookup_by = "alpha3"
    row_continent_wins = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.idx_code = -1
        self.idx_continent = -1
        self.today = today_iso()

    def check_headers(self, headers: Sequence[str]) -> None:
        if list(headers[:len(OWID_ETL_COMPACT_HEADERS)]) != list(OWID_ETL_COMPACT_HEADERS):
            raise HeaderMismatchError(self.name, headers)
        if "code" not in headers or "continent" not in headers:
            raise HeaderMismatchError(
                self.name, headers, "headers for country code and continent are missing"
            )
        self.idx_code = list(headers).index("code")
        self.idx_continent = list(headers).index("continent")

    def check_length(self, fields: Sequence[str], line: int) -> None:
        required = max(self.idx_code, self.idx_continent, IDX_DEATHS) + 1
        if len(fields) < required:
            raise RecordParseError(
                line, f"expected at least {required} data elements, but found {len(fields)}"
            )

    def row_key(self, fields: Sequence[str]) -> Optional[str]:
        code = fields[self.idx_code]
        code = CODE_REPLACEMENTS.get(code, code)
        if not code:
            self.skip("empty country key")
            return None
        if code.startswith(AGGREGATE_PREFIX):
            self.skip("aggregate")
            return None
        # ISO dates compare lexically
        if self.settings.drop_future_dates and fields[IDX_DATE] > self.today:
            self.skip("future date")
            return None
        return code

    def row_identity(self, key: str, fields: Sequence[str]) -> CountryIdentity:
        return CountryIdentity(
            name=fields[IDX_NAME],
            iso_alpha3=key,
            continent=fields[self.idx_continent],
        )

    def parse_row(self, fields: Sequence[str]) -> DailyRecord:
        return DailyRecord(
            date=self.parse_date_field(fields[IDX_DATE]),
            cases=parse_count(fields[IDX_CASES]),
            deaths=parse_count(fields[IDX_DEATHS]),
        )

    def finish_records(self, batch: CountryBatch, records: List[DailyRecord]) -> List[DailyRecord]:
        kept, removed = cutoff_non_contiguous_dates(records)
        if removed:
            self.skip("snapshot")
            self.logger.warning(
                f"{batch.key}: dropped {len(removed)} snapshot rows after {kept[-1].date}: "
                f"{', '.join(record.date for record in removed)}"
            )
        return kept
