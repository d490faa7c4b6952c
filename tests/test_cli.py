"""
Tests for the command line interface
"""
import pytest
from typer.testing import CliRunner

from coronadb import __version__
from coronadb.cli.main import app
from coronadb.storage import CovidDatabase

runner = CliRunner()


@pytest.fixture
def ecdc_database(fixtures_dir, tmp_path):
    path = tmp_path / "ecdc.db"
    result = runner.invoke(app, ["db", str(fixtures_dir / "ecdc.csv"), str(path)])
    assert result.exit_code == 0, result.output
    return path


# ============================================================================
# Info commands
# ============================================================================

def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_config():
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "CoronaDB configuration" in result.output


def test_detect(fixtures_dir):
    result = runner.invoke(app, ["detect", str(fixtures_dir / "owid_etl_compact.csv")])
    assert result.exit_code == 0
    assert "owid_etl_compact" in result.output


def test_detect_unrecognized(write_csv):
    result = runner.invoke(app, ["detect", str(write_csv("C,S,V\n"))])
    assert result.exit_code == 1


def test_detect_missing_file(tmp_path):
    result = runner.invoke(app, ["detect", str(tmp_path / "missing.csv")])
    assert result.exit_code == 1


# ============================================================================
# Database commands
# ============================================================================

def test_db(ecdc_database):
    with CovidDatabase.open(ecdc_database) as db:
        assert len(db.countries()) == 2


def test_db_output(fixtures_dir, tmp_path):
    result = runner.invoke(app, ["db", str(fixtures_dir / "owid_etl_compact_snapshots.csv"), str(tmp_path / "al.db")])
    assert result.exit_code == 0
    assert "1 countries" in result.output
    assert "snapshot: 1" in result.output


def test_db_refuses_existing_database(ecdc_database, fixtures_dir):
    result = runner.invoke(app, ["db", str(fixtures_dir / "owid.csv"), str(ecdc_database)])
    assert result.exit_code == 1


def test_db_unrecognized_input(write_csv, db_path):
    result = runner.invoke(app, ["db", str(write_csv("C,S,V\n")), str(db_path)])
    assert result.exit_code == 1
    assert not db_path.exists()


def test_db_count_out_of_range(write_csv, db_path):
    text = (
        "dateRep,day,month,year,cases,deaths,countriesAndTerritories,geoId,countryterritoryCode,"
        "popData2019,continentExp,Cumulative_number_for_14_days_of_COVID-19_cases_per_100000\n"
        "14/12/2020,14,12,2020,99999999999999999999,6,Afghanistan,AF,AFG,38041757,Asia,\n"
    )
    result = runner.invoke(app, ["db", str(write_csv(text)), str(db_path)])
    assert result.exit_code == 1
    # reported as a diagnostic, not a traceback
    assert isinstance(result.exception, SystemExit)


def test_csv(ecdc_database, tmp_path):
    output = tmp_path / "export.csv"
    result = runner.invoke(app, ["csv", str(ecdc_database), str(output)])
    assert result.exit_code == 0
    assert "16 rows" in result.output
    assert output.read_text(encoding="utf-8").startswith("dateRep,day,month,year,cases,deaths")


def test_csv_missing_database(tmp_path):
    result = runner.invoke(app, ["csv", str(tmp_path / "missing.db"), str(tmp_path / "out.csv")])
    assert result.exit_code == 1
    assert not (tmp_path / "out.csv").exists()


def test_backfill_on_current_database(ecdc_database):
    result = runner.invoke(app, ["backfill", str(ecdc_database)])
    assert result.exit_code == 0
    assert "already exist" in result.output


def test_countries(ecdc_database):
    result = runner.invoke(app, ["countries", str(ecdc_database)])
    assert result.exit_code == 0
    assert "Afghanistan" in result.output
    assert "Albania" in result.output


def test_countries_of_continent(ecdc_database):
    result = runner.invoke(app, ["countries", str(ecdc_database), "--continent", "Asia"])
    assert result.exit_code == 0
    assert "Afghanistan" in result.output
    assert "Albania" not in result.output


def test_world(ecdc_database):
    result = runner.invoke(app, ["world", str(ecdc_database), "--days", "1"])
    assert result.exit_code == 0
    assert "2020-12-14" in result.output
    # 746 Afghanistan + 879 Albania
    assert "1625" in result.output
    assert "2020-12-13" not in result.output


def test_world_accumulated(ecdc_database, monkeypatch, clear_config_cache):
    monkeypatch.setenv("INGEST__WORLD_REGRESSION_WINDOW", "0")
    result = runner.invoke(app, ["world", str(ecdc_database), "--days", "1", "--accumulated"])
    assert result.exit_code == 0
    # 3429 Afghanistan + 1667 Albania
    assert "5096" in result.output


def test_world_accumulated_drops_regressing_days(ecdc_database):
    # the conveyance entry reports -9 cases on its second day
    result = runner.invoke(app, ["world", str(ecdc_database), "--days", "1", "--accumulated"])
    assert result.exit_code == 0
    assert "2020-03-09" in result.output
    assert "2020-12-14" not in result.output
