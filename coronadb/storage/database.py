"""
CoronaDB Storage Layer

SQLite database with the tables country and covid19
- Idempotent get-or-insert of countries
- One upsert statement per country series
- Backfill of the total columns in databases created by older versions
- Read accessors used by the site generator and the CSV export
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

from sqlalchemy import func, inspect, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from coronadb.core import StorageError, create_sqlite_engine, get_config, get_logger, get_session_maker, session_scope
from coronadb.domain import (
    Base,
    Country,
    CountryIdentity,
    CovidRecord,
    Incidence,
    NumbersRecord,
    NumbersWithIncidence,
    TotalsRecord,
)

logger = get_logger(__name__)

# Continent of ships and other entries that are not countries
OTHER_CONTINENT = "Other"

_UPSERT_COLUMNS = ("cases", "deaths", "incidence14", "incidence7", "totalCases", "totalDeaths")

_TOTAL_COLUMNS = {
    "totalCases": "cases",
    "totalDeaths": "deaths",
}


def drop_regressing_tail(numbers: Sequence[NumbersRecord], window: int) -> List[NumbersRecord]:
    """
    Cut accumulated numbers at the first late day whose total went down

    Countries report with different delays, so the sums of the most recent
    days can be lower than the sum of a day before. Only the last `window`
    entries are checked; 0 disables the check.
    """
    numbers = list(numbers)
    if window <= 0 or len(numbers) < 2:
        return numbers

    start = max(0, len(numbers) - window)
    highest = numbers[start].cases
    for idx in range(start + 1, len(numbers)):
        if numbers[idx].cases < highest:
            logger.debug(f"World totals regress on {numbers[idx].date}, dropping {len(numbers) - idx} days")
            return numbers[:idx]
        highest = max(highest, numbers[idx].cases)
    return numbers


def _identity(country: Country) -> CountryIdentity:
    return CountryIdentity(
        country_id=country.country_id,
        name=country.name,
        population=country.population,
        iso_alpha2=country.iso_alpha2,
        iso_alpha3=country.iso_alpha3,
        continent=country.continent,
    )


class CovidDatabase:
    """
    Access to one SQLite database file

    Usage:
        with CovidDatabase.create("corona.db") as db:
            country_id = db.get_or_insert_country("DE", "Germany", 83019213, "DEU", "Europe")
            db.insert_series(country_id, records)

        with CovidDatabase.open("corona.db") as db:
            for country in db.countries():
                print(country.name, db.incidence14(country.country_id)[-1])
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.engine = create_sqlite_engine(self.path)
        self.session_maker = get_session_maker(self.engine)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, path: Union[str, Path]) -> "CovidDatabase":
        """
        Create a new database with empty tables

        Raises:
            StorageError: the file already exists or the schema cannot be created
        """
        path = Path(path)
        if path.exists():
            raise StorageError(f"Database file {path} already exists, it will not be overwritten")

        db = cls(path)
        with db._storage_errors("create the database schema"):
            Base.metadata.create_all(db.engine)
        logger.info(f"Database created: {path}")
        return db

    @classmethod
    def open(cls, path: Union[str, Path]) -> "CovidDatabase":
        """
        Open an existing database

        Raises:
            StorageError: the file does not exist
        """
        path = Path(path)
        if not path.is_file():
            raise StorageError(f"Database file {path} does not exist")
        return cls(path)

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "CovidDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except (SQLAlchemyError, OverflowError) as e:
            logger.error(f"Could not {action} in {self.path}: {e}")
            raise StorageError(f"Could not {action}: {e}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def get_or_insert_country(
        self,
        iso_alpha2: str,
        name: str,
        population: int,
        iso_alpha3: str,
        continent: str,
    ) -> int:
        """
        Id of a country, inserting the country if it is not known yet

        The country is looked up by its ISO alpha-2 code. Candidates without
        that code are looked up by alpha-3 code, and without both by name.

        Returns:
            int: id of the country, always > 0
        """
        if iso_alpha2:
            condition = Country.iso_alpha2 == iso_alpha2
        elif iso_alpha3:
            condition = Country.iso_alpha3 == iso_alpha3
        else:
            condition = Country.name == name

        with self._storage_errors(f"get or insert country '{name}'"):
            with session_scope(self.session_maker) as session:
                existing = session.execute(
                    select(Country.country_id).where(condition).order_by(Country.country_id).limit(1)
                ).scalar_one_or_none()
                if existing is not None:
                    return existing

                country = Country(
                    name=name,
                    population=population,
                    iso_alpha2=iso_alpha2,
                    iso_alpha3=iso_alpha3,
                    continent=continent,
                )
                session.add(country)
                session.flush()
                logger.debug(f"Inserted country {name} ({iso_alpha2 or iso_alpha3}) with id {country.country_id}")
                return country.country_id

    def insert_series(self, country_id: int, records: Sequence[TotalsRecord]) -> int:
        """
        Write all records of one country in one transaction

        Records of dates that are already stored replace the stored rows.

        Returns:
            int: number of written records

        Raises:
            StorageError: invalid country id or failed insert
        """
        if not records:
            return 0
        if country_id <= 0:
            raise StorageError(f"Invalid country id {country_id}, records cannot be inserted")

        stmt = sqlite_insert(CovidRecord.__table__)
        stmt = stmt.on_conflict_do_update(
            index_elements=["countryId", "date"],
            set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
        )

        with self._storage_errors(f"insert {len(records)} records of country {country_id}"):
            with session_scope(self.session_maker) as session:
                session.execute(stmt, [record.to_row(country_id) for record in records])
        logger.debug(f"Inserted {len(records)} records of country {country_id}")
        return len(records)

    def backfill_totals(self) -> List[str]:
        """
        Add and fill the columns totalCases and totalDeaths if they are missing

        Databases of older versions lack these columns. Each total is the sum
        of the country's numbers up to and including that date, which is an
        expensive self-join, so it only runs for missing columns.

        Returns:
            List[str]: names of the columns that were added
        """
        with self._storage_errors("inspect table covid19"):
            existing = {column["name"] for column in inspect(self.engine).get_columns(CovidRecord.__tablename__)}

        added = []
        for total_column, source_column in _TOTAL_COLUMNS.items():
            if total_column in existing:
                continue
            logger.info(f"Adding column {total_column} to covid19, this may take a while")
            with self._storage_errors(f"add column {total_column}"):
                with self.engine.begin() as conn:
                    conn.execute(text(f"ALTER TABLE covid19 ADD COLUMN {total_column} INTEGER"))
                    conn.execute(text(
                        f"UPDATE covid19 SET {total_column} = "
                        f"(SELECT SUM({source_column}) FROM covid19 AS c2 "
                        f"WHERE c2.countryId = covid19.countryId AND c2.date <= covid19.date)"
                    ))
            added.append(total_column)

        if added:
            logger.info(f"Backfilled columns: {', '.join(added)}")
        else:
            logger.debug("Columns for accumulated numbers already exist")
        return added

    # ------------------------------------------------------------------
    # Countries
    # ------------------------------------------------------------------

    def countries(self) -> List[CountryIdentity]:
        """Countries with an ISO alpha-2 code, without the "Other" entries, ordered by name"""
        stmt = (
            select(Country)
            .where(Country.iso_alpha2 != "", Country.continent != OTHER_CONTINENT)
            .order_by(Country.name)
        )
        with self._storage_errors("read countries"):
            with session_scope(self.session_maker) as session:
                return [_identity(country) for country in session.execute(stmt).scalars()]

    def country(self, country_id: int) -> Optional[CountryIdentity]:
        with self._storage_errors(f"read country {country_id}"):
            with session_scope(self.session_maker) as session:
                country = session.get(Country, country_id)
                return _identity(country) if country is not None else None

    def continents(self) -> List[str]:
        stmt = (
            select(Country.continent)
            .distinct()
            .where(Country.continent != OTHER_CONTINENT, Country.continent != "")
            .order_by(Country.continent)
        )
        with self._storage_errors("read continents"):
            with session_scope(self.session_maker) as session:
                return list(session.execute(stmt).scalars())

    def countries_of_continent(self, continent: str) -> List[CountryIdentity]:
        stmt = (
            select(Country)
            .where(Country.iso_alpha2 != "", Country.continent == continent)
            .order_by(Country.name)
        )
        with self._storage_errors(f"read countries of {continent}"):
            with session_scope(self.session_maker) as session:
                return [_identity(country) for country in session.execute(stmt).scalars()]

    # ------------------------------------------------------------------
    # Numbers
    # ------------------------------------------------------------------

    def _numbers(self, stmt, action: str) -> List[NumbersRecord]:
        with self._storage_errors(action):
            with session_scope(self.session_maker) as session:
                return [
                    NumbersRecord(date=row[0], cases=row[1] or 0, deaths=row[2] or 0)
                    for row in session.execute(stmt)
                ]

    def numbers(self, country_id: int) -> List[NumbersRecord]:
        """Daily cases and deaths of a country"""
        stmt = (
            select(CovidRecord.date, CovidRecord.cases, CovidRecord.deaths)
            .where(CovidRecord.country_id == country_id)
            .order_by(CovidRecord.date)
        )
        return self._numbers(stmt, f"read numbers of country {country_id}")

    def accumulated_numbers(self, country_id: int) -> List[NumbersRecord]:
        """Total cases and deaths of a country up to each date"""
        stmt = (
            select(CovidRecord.date, CovidRecord.total_cases, CovidRecord.total_deaths)
            .where(CovidRecord.country_id == country_id)
            .order_by(CovidRecord.date)
        )
        return self._numbers(stmt, f"read accumulated numbers of country {country_id}")

    def numbers_world(self) -> List[NumbersRecord]:
        """Daily cases and deaths summed over all countries"""
        stmt = (
            select(CovidRecord.date, func.sum(CovidRecord.cases), func.sum(CovidRecord.deaths))
            .group_by(CovidRecord.date)
            .order_by(CovidRecord.date)
        )
        return self._numbers(stmt, "read world numbers")

    def accumulated_numbers_world(self, window: Optional[int] = None) -> List[NumbersRecord]:
        """
        Total cases and deaths summed over all countries

        Trailing days whose sum drops below an earlier sum of the last
        `window` days are incomplete and left out (see drop_regressing_tail).
        The window defaults to settings.ingest.world_regression_window.
        """
        if window is None:
            window = get_config().ingest.world_regression_window
        stmt = (
            select(CovidRecord.date, func.sum(CovidRecord.total_cases), func.sum(CovidRecord.total_deaths))
            .group_by(CovidRecord.date)
            .order_by(CovidRecord.date)
        )
        return drop_regressing_tail(self._numbers(stmt, "read accumulated world numbers"), window)

    def numbers_continent(self, continent: str) -> List[NumbersRecord]:
        stmt = (
            select(CovidRecord.date, func.sum(CovidRecord.cases), func.sum(CovidRecord.deaths))
            .join(Country, Country.country_id == CovidRecord.country_id)
            .where(Country.continent == continent)
            .group_by(CovidRecord.date)
            .order_by(CovidRecord.date)
        )
        return self._numbers(stmt, f"read numbers of {continent}")

    def accumulated_numbers_continent(self, continent: str) -> List[NumbersRecord]:
        stmt = (
            select(CovidRecord.date, func.sum(CovidRecord.total_cases), func.sum(CovidRecord.total_deaths))
            .join(Country, Country.country_id == CovidRecord.country_id)
            .where(Country.continent == continent)
            .group_by(CovidRecord.date)
            .order_by(CovidRecord.date)
        )
        return self._numbers(stmt, f"read accumulated numbers of {continent}")

    def numbers_with_incidence(self, country_id: int) -> List[NumbersWithIncidence]:
        """Daily numbers of a country with the stored (unrounded) incidence values"""
        stmt = (
            select(
                CovidRecord.date,
                CovidRecord.cases,
                CovidRecord.deaths,
                CovidRecord.incidence14,
                CovidRecord.incidence7,
            )
            .where(CovidRecord.country_id == country_id)
            .order_by(CovidRecord.date)
        )
        with self._storage_errors(f"read numbers of country {country_id}"):
            with session_scope(self.session_maker) as session:
                return [
                    NumbersWithIncidence(
                        date=row.date,
                        cases=row.cases,
                        deaths=row.deaths,
                        incidence_14d=row.incidence14,
                        incidence_7d=row.incidence7,
                    )
                    for row in session.execute(stmt)
                ]

    # ------------------------------------------------------------------
    # Incidence
    # ------------------------------------------------------------------

    def _incidence(self, country_id: int, days: int) -> List[Incidence]:
        if days == 14:
            column = CovidRecord.incidence14
        elif days == 7:
            column = CovidRecord.incidence7
        else:
            raise ValueError(f"Only 7 and 14 day incidence values are stored, not {days}")

        # NULL marks days without a known incidence
        stmt = (
            select(CovidRecord.date, func.round(column, 2))
            .where(CovidRecord.country_id == country_id, func.ifnull(column, -1.0) >= 0.0)
            .order_by(CovidRecord.date)
        )
        with self._storage_errors(f"read {days} day incidence of country {country_id}"):
            with session_scope(self.session_maker) as session:
                return [Incidence(date=row[0], value=row[1]) for row in session.execute(stmt)]

    def incidence14(self, country_id: int) -> List[Incidence]:
        """14 day incidence of a country, rounded to two decimals"""
        return self._incidence(country_id, 14)

    def incidence7(self, country_id: int) -> List[Incidence]:
        """7 day incidence of a country, rounded to two decimals"""
        return self._incidence(country_id, 7)

    def incidence_by_year(self, country_id: int, days: int = 14) -> Dict[str, List[Incidence]]:
        """Incidence of a country grouped by calendar year ("2020": [...], ...)"""
        by_year: Dict[str, List[Incidence]] = {}
        for incidence in self._incidence(country_id, days):
            by_year.setdefault(incidence.date[:4], []).append(incidence)
        return by_year
