"""
Tests for the CSV export
"""
import pandas as pd
import pytest

from coronadb.core import StorageError
from coronadb.data.detector import CsvFormat, detect_format
from coronadb.data.processors import create_database
from coronadb.export import EXPORT_HEADERS, CsvExporter
from coronadb.storage import CovidDatabase


@pytest.fixture
def ecdc_db(fixtures_dir, db_path):
    create_database(fixtures_dir / "ecdc.csv", db_path)
    db = CovidDatabase.open(db_path)
    yield db
    db.close()


def test_dataframe_layout(ecdc_db):
    df = CsvExporter(ecdc_db).to_dataframe()

    assert list(df.columns) == EXPORT_HEADERS
    # conveyance entries are not listed as countries
    assert sorted(df["geoId"].unique()) == ["AF", "AL"]
    assert len(df) == 16

    first = df.iloc[0]
    assert first["dateRep"] == "01/12/2020"
    assert first["countriesAndTerritories"] == "Afghanistan"
    assert first["popData2019"] == 38041757


def test_export_reads_back_as_ecdc(ecdc_db, tmp_path):
    output = tmp_path / "export.csv"
    assert CsvExporter(ecdc_db).export(output) == 16
    assert detect_format(output) == CsvFormat.ECDC

    summary = create_database(output, tmp_path / "again.db")
    assert summary.countries == 2
    assert summary.records == 16

    with CovidDatabase.open(tmp_path / "again.db") as db:
        afghanistan = [c for c in db.countries() if c.iso_alpha2 == "AF"][0]
        last = db.numbers_with_incidence(afghanistan.country_id)[-1]
        assert last.date == "2020-12-14"
        assert (last.cases, last.deaths) == (746, 6)
        assert last.incidence_14d == pytest.approx(9.01377925)
        assert db.accumulated_numbers(afghanistan.country_id)[-1].cases == 3429


def test_export_keeps_empty_incidence(ecdc_db, tmp_path):
    output = tmp_path / "export.csv"
    CsvExporter(ecdc_db).export(output)

    df = pd.read_csv(output, dtype=str, keep_default_na=False)
    afghanistan = df[df["geoId"] == "AF"]
    assert (afghanistan[EXPORT_HEADERS[11]] == "").sum() == 13


def test_export_refuses_existing_file(ecdc_db, tmp_path):
    output = tmp_path / "export.csv"
    output.write_text("keep me", encoding="utf-8")

    with pytest.raises(StorageError):
        CsvExporter(ecdc_db).export(output)
    assert output.read_text(encoding="utf-8") == "keep me"


def test_export_of_empty_database(covid_db, tmp_path):
    output = tmp_path / "export.csv"
    with pytest.raises(StorageError):
        CsvExporter(covid_db).export(output)
    assert not output.exists()


def test_export_skips_countries_without_numbers(covid_db, tmp_path):
    covid_db.get_or_insert_country("DE", "Germany", 83019213, "DEU", "Europe")

    df = CsvExporter(covid_db).to_dataframe()
    assert df.empty
    assert list(df.columns) == EXPORT_HEADERS
