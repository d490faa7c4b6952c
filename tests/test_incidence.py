"""
Incidence and totals tests
"""
import pytest

from coronadb.data.processors import calculate_incidence, calculate_totals
from coronadb.domain import DailyRecord, EnrichedRecord

AFGHANISTAN_POPULATION = 38_041_757
GERMANY_POPULATION = 83_019_213

AFGHANISTAN_DECEMBER = [
    ("2020-12-01", 272, 11), ("2020-12-02", 400, 48), ("2020-12-03", 202, 19),
    ("2020-12-04", 119, 5), ("2020-12-05", 235, 18), ("2020-12-06", 234, 10),
    ("2020-12-07", 210, 26), ("2020-12-08", 200, 6), ("2020-12-09", 135, 13),
    ("2020-12-10", 202, 16), ("2020-12-11", 63, 10), ("2020-12-12", 113, 11),
    ("2020-12-13", 298, 9), ("2020-12-14", 746, 6),
]

GERMANY_NOVEMBER = [
    ("2020-10-31", 19059, 103), ("2020-11-01", 14177, 29), ("2020-11-02", 12097, 49),
    ("2020-11-03", 15352, 131), ("2020-11-04", 17214, 151), ("2020-11-05", 19990, 118),
    ("2020-11-06", 21506, 166), ("2020-11-07", 23399, 130), ("2020-11-08", 16017, 63),
    ("2020-11-09", 13363, 63), ("2020-11-10", 15332, 154), ("2020-11-11", 18487, 261),
    ("2020-11-12", 21866, 215), ("2020-11-13", 23542, 218), ("2020-11-14", 22461, 178),
    ("2020-11-15", 16947, 107), ("2020-11-16", 10824, 62), ("2020-11-17", 14419, 267),
    ("2020-11-18", 17561, 305), ("2020-11-19", 22609, 251), ("2020-11-20", 23648, 260),
    ("2020-11-21", 22964, 254), ("2020-11-22", 15741, 138), ("2020-11-23", 10864, 90),
    ("2020-11-24", 13554, 249), ("2020-11-25", 18633, 410), ("2020-11-26", 22268, 389),
    ("2020-11-27", 22806, 426), ("2020-11-28", 21695, 379), ("2020-11-29", 14611, 158),
    ("2020-11-30", 11169, 125),
]


def _records(rows):
    return [DailyRecord(date=d, cases=c, deaths=x) for d, c, x in rows]


# ============================================================================
# calculate_incidence
# ============================================================================

@pytest.mark.parametrize("length", [0, 1, 6, 7, 13, 14, 31])
def test_number_of_populated_values(length):
    records = _records(GERMANY_NOVEMBER[:length])
    enriched = calculate_incidence(records, GERMANY_POPULATION)

    assert len(enriched) == length
    assert sum(r.incidence_7d is not None for r in enriched) == max(0, length - 6)
    assert sum(r.incidence_14d is not None for r in enriched) == max(0, length - 13)


@pytest.mark.parametrize("population", [0, -1])
def test_unknown_population(population):
    records = _records(GERMANY_NOVEMBER)
    enriched = calculate_incidence(records, population)

    assert len(enriched) == len(records)
    assert all(r.incidence_14d is None and r.incidence_7d is None for r in enriched)


def test_numbers_are_kept():
    records = _records(AFGHANISTAN_DECEMBER)
    enriched = calculate_incidence(records, AFGHANISTAN_POPULATION)
    for record, result in zip(records, enriched):
        assert (result.date, result.cases, result.deaths) == (record.date, record.cases, record.deaths)


def test_fourteen_elements():
    enriched = calculate_incidence(_records(AFGHANISTAN_DECEMBER), AFGHANISTAN_POPULATION)

    assert all(r.incidence_14d is None for r in enriched[:13])
    assert 9.013779 < enriched[13].incidence_14d < 9.013780


def test_more_than_fourteen_elements():
    enriched = calculate_incidence(_records(GERMANY_NOVEMBER), GERMANY_POPULATION)

    expected = {
        13: 302.82267311,
        14: 306.92051971,
        15: 310.25709675,
        16: 308.72371676,
        17: 307.59988052,
        18: 308.01785606,
    }
    for idx, value in expected.items():
        assert enriched[idx].incidence_14d == pytest.approx(value, abs=1e-6)


def test_seven_day_incidence_matches_window_sum():
    records = _records(GERMANY_NOVEMBER)
    enriched = calculate_incidence(records, GERMANY_POPULATION)

    for idx in range(6, len(records)):
        window = sum(r.cases for r in records[idx - 6:idx + 1])
        assert enriched[idx].incidence_7d == pytest.approx(window * 100000 / GERMANY_POPULATION)


def test_negative_corrections_lower_the_incidence():
    rows = [(f"2021-01-{day:02d}", 10, 0) for day in range(1, 8)] + [("2021-01-08", -20, 0)]
    enriched = calculate_incidence(_records(rows), 100_000)
    assert enriched[6].incidence_7d == pytest.approx(70.0)
    assert enriched[7].incidence_7d == pytest.approx(40.0)


def test_calculation_is_deterministic():
    records = _records(GERMANY_NOVEMBER)
    assert calculate_incidence(records, GERMANY_POPULATION) == calculate_incidence(records, GERMANY_POPULATION)


# ============================================================================
# calculate_totals
# ============================================================================

def test_totals_of_empty_series():
    assert calculate_totals([]) == []


def test_totals_of_single_record():
    totals = calculate_totals([EnrichedRecord(date="2020-03-01", cases=5, deaths=1)])
    assert totals[0].total_cases == 5
    assert totals[0].total_deaths == 1


def test_totals_are_running_sums():
    enriched = calculate_incidence(_records(AFGHANISTAN_DECEMBER), AFGHANISTAN_POPULATION)
    totals = calculate_totals(enriched)

    for idx in range(1, len(totals)):
        assert totals[idx].total_cases == totals[idx - 1].total_cases + totals[idx].cases
        assert totals[idx].total_deaths == totals[idx - 1].total_deaths + totals[idx].deaths
    assert totals[-1].total_cases == 3429
    assert totals[-1].total_deaths == 208
    assert totals[-1].incidence_14d == enriched[-1].incidence_14d


def test_totals_may_decrease():
    records = [
        EnrichedRecord(date="2020-03-01", cases=5, deaths=2),
        EnrichedRecord(date="2020-03-02", cases=-3, deaths=-1),
    ]
    totals = calculate_totals(records)
    assert [t.total_cases for t in totals] == [5, 2]
    assert [t.total_deaths for t in totals] == [2, 1]
