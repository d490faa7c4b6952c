"""
CoronaDB ECDC Parser

Legacy daily CSV of the European Centre for Disease Prevention and Control.
Rows carry the full country identity and the 14 day (later also 7 day)
incidence, so no gazetteer lookup and no incidence calculation is needed.
"""
from typing import Optional, Sequence

from coronadb.core import HeaderMismatchError, RecordParseError
from coronadb.data.dates import date_from_parts
from coronadb.domain import CountryIdentity, EnrichedRecord

from .base import BaseCsvParser, parse_count, parse_optional_float

ECDC_HEADERS = (
    "dateRep",
    "day",
    "month",
    "year",
    "cases",
    "deaths",
    "countriesAndTerritories",
    "geoId",
    "countryterritoryCode",
    "popData2019",
    "continentExp",
    "Cumulative_number_for_14_days_of_COVID-19_cases_per_100000",
    "Cumulative_number_for_7_days_of_COVID-19_cases_per_100000",
)

IDX_DAY = 1
IDX_MONTH = 2
IDX_YEAR = 3
IDX_CASES = 4
IDX_DEATHS = 5
IDX_NAME = 6
IDX_GEO_ID = 7
IDX_ISO3 = 8
IDX_POPULATION = 9
IDX_CONTINENT = 10
IDX_INCIDENCE_14 = 11
IDX_INCIDENCE_7 = 12


class EcdcParser(BaseCsvParser):
    """Parser of the ECDC CSV (12 columns, or 13 with the 7 day incidence)"""

    name = "ECDC"
    expected_headers = ECDC_HEADERS
    has_incidence = True

    def check_headers(self, headers: Sequence[str]) -> None:
        headers = list(headers)
        if headers != list(ECDC_HEADERS) and headers != list(ECDC_HEADERS[:12]):
            raise HeaderMismatchError(self.name, headers)

    def check_length(self, fields: Sequence[str], line: int) -> None:
        if len(fields) not in (12, 13):
            raise RecordParseError(
                line, f"expected twelve or thirteen data elements, but found {len(fields)}"
            )

    def row_key(self, fields: Sequence[str]) -> Optional[str]:
        geo_id = fields[IDX_GEO_ID]
        if not geo_id:
            self.skip("empty country key")
            return None
        return geo_id

    def row_identity(self, key: str, fields: Sequence[str]) -> CountryIdentity:
        try:
            population = int(fields[IDX_POPULATION])
        except ValueError:
            population = -1
        return CountryIdentity(
            name=fields[IDX_NAME].replace("_", " "),
            population=population,
            iso_alpha2=key,
            iso_alpha3=fields[IDX_ISO3],
            continent=fields[IDX_CONTINENT],
        )

    def parse_row(self, fields: Sequence[str]) -> EnrichedRecord:
        incidence_7d = fields[IDX_INCIDENCE_7] if len(fields) > IDX_INCIDENCE_7 else ""
        return EnrichedRecord(
            date=date_from_parts(fields[IDX_YEAR], fields[IDX_MONTH], fields[IDX_DAY]),
            cases=parse_count(fields[IDX_CASES]),
            deaths=parse_count(fields[IDX_DEATHS]),
            incidence_14d=parse_optional_float(fields[IDX_INCIDENCE_14]),
            incidence_7d=parse_optional_float(incidence_7d),
        )
