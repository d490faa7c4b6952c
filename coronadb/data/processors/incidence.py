"""
CoronaDB Incidence & Totals

Pure functions over the chronologically sorted series of one country
"""
from typing import List, Optional, Sequence

from coronadb.domain import DailyRecord, EnrichedRecord, TotalsRecord

PER_INHABITANTS = 100_000.0


def _rolling_incidence(cases: Sequence[int], window: int, population: int) -> List[Optional[float]]:
    """
    N-day incidence for every index, None while fewer than N days are known

    The window sum is updated incrementally (add the new day, subtract the
    day leaving the window), which fixes the order of the integer additions.
    """
    result: List[Optional[float]] = []
    window_sum = 0
    for idx, value in enumerate(cases):
        window_sum += value
        if idx >= window:
            window_sum -= cases[idx - window]
        if idx + 1 < window:
            result.append(None)
        else:
            result.append(window_sum * PER_INHABITANTS / population)
    return result


def calculate_incidence(records: Sequence[DailyRecord], population: int) -> List[EnrichedRecord]:
    """
    Add the 14 and 7 day incidence per 100,000 inhabitants

    Args:
        records: daily records sorted by date, one per day
        population: inhabitants; values <= 0 mean unknown

    Returns:
        List[EnrichedRecord]: same length and order as records. Incidence
        values are None for the first 13 (6) records and for every record
        if the population is unknown.
    """
    if population <= 0:
        return [
            EnrichedRecord(date=record.date, cases=record.cases, deaths=record.deaths)
            for record in records
        ]

    cases = [record.cases for record in records]
    incidence14 = _rolling_incidence(cases, 14, population)
    incidence7 = _rolling_incidence(cases, 7, population)

    return [
        EnrichedRecord(
            date=record.date,
            cases=record.cases,
            deaths=record.deaths,
            incidence_14d=inc14,
            incidence_7d=inc7,
        )
        for record, inc14, inc7 in zip(records, incidence14, incidence7)
    ]


def calculate_totals(records: Sequence[EnrichedRecord]) -> List[TotalsRecord]:
    """
    Add the running totals of cases and deaths

    Negative corrections make the totals decrease, they are kept as they are.
    """
    result: List[TotalsRecord] = []
    total_cases = 0
    total_deaths = 0
    for record in records:
        total_cases += record.cases
        total_deaths += record.deaths
        result.append(
            TotalsRecord(
                date=record.date,
                cases=record.cases,
                deaths=record.deaths,
                incidence_14d=getattr(record, "incidence_14d", None),
                incidence_7d=getattr(record, "incidence_7d", None),
                total_cases=total_cases,
                total_deaths=total_deaths,
            )
        )
    return result
