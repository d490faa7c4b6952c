"""
CoronaDB Record Types

Immutable in-memory values passed between parsers, processors and storage
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CountryIdentity:
    """
    Identity of one country

    A country_id of 0 marks a candidate that has not been stored yet.
    A population of -1 means the population is unknown.
    """

    name: str
    population: int = -1
    iso_alpha2: str = ""
    iso_alpha3: str = ""
    continent: str = ""
    country_id: int = 0

    def with_id(self, country_id: int) -> "CountryIdentity":
        return replace(self, country_id=country_id)


@dataclass(frozen=True)
class DailyRecord:
    """New cases and deaths of one country on one day (date is YYYY-MM-DD)"""

    date: str
    cases: int
    deaths: int


@dataclass(frozen=True)
class EnrichedRecord(DailyRecord):
    """Daily record with the 14 and 7 day incidence per 100,000 inhabitants"""

    incidence_14d: Optional[float] = None
    incidence_7d: Optional[float] = None


@dataclass(frozen=True)
class TotalsRecord(EnrichedRecord):
    """Enriched record with the running totals up to and including this day"""

    total_cases: int = 0
    total_deaths: int = 0

    def to_row(self, country_id: int) -> Dict[str, Any]:
        """Column values of the covid19 table"""
        return {
            "countryId": country_id,
            "date": self.date,
            "cases": self.cases,
            "deaths": self.deaths,
            "incidence14": self.incidence_14d,
            "incidence7": self.incidence_7d,
            "totalCases": self.total_cases,
            "totalDeaths": self.total_deaths,
        }


@dataclass(frozen=True)
class NumbersRecord:
    """Cases and deaths of one day as read back from the database"""

    date: str
    cases: int
    deaths: int


@dataclass(frozen=True)
class NumbersWithIncidence(NumbersRecord):
    incidence_14d: Optional[float] = None
    incidence_7d: Optional[float] = None


@dataclass(frozen=True)
class Incidence:
    """One incidence value, rounded to two decimals"""

    date: str
    value: float
