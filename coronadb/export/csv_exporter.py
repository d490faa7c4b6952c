"""
CoronaDB CSV Exporter

Writes the numbers of a database as CSV in the layout of the ECDC file, so the
result can be read again with the ECDC parser
"""
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from coronadb.core import StorageError, get_logger
from coronadb.data.parsers.ecdc import ECDC_HEADERS
from coronadb.domain import CountryIdentity, NumbersWithIncidence
from coronadb.storage import CovidDatabase

logger = get_logger(__name__)

EXPORT_HEADERS = list(ECDC_HEADERS[:12])


class CsvExporter:
    """
    CSV exporter

    Usage:
        with CovidDatabase.open("corona.db") as db:
            CsvExporter(db).export("corona.csv")
    """

    def __init__(self, db: CovidDatabase):
        self.db = db

    @staticmethod
    def _rows(country: CountryIdentity, numbers: List[NumbersWithIncidence]) -> List[Dict]:
        rows = []
        for number in numbers:
            year, month, day = number.date[0:4], number.date[5:7], number.date[8:10]
            rows.append({
                "dateRep": f"{day}/{month}/{year}",
                "day": day,
                "month": month,
                "year": year,
                "cases": number.cases,
                "deaths": number.deaths,
                "countriesAndTerritories": country.name,
                "geoId": country.iso_alpha2,
                "countryterritoryCode": country.iso_alpha3,
                "popData2019": country.population,
                "continentExp": country.continent,
                EXPORT_HEADERS[11]: number.incidence_14d,
            })
        return rows

    def to_dataframe(self) -> pd.DataFrame:
        """
        All listed countries as one DataFrame in export layout

        Raises:
            StorageError: the database contains no countries
        """
        countries = self.db.countries()
        if not countries:
            raise StorageError(f"Could not find any countries in the database {self.db.path}")

        rows: List[Dict] = []
        for country in countries:
            numbers = self.db.numbers_with_incidence(country.country_id)
            if not numbers:
                logger.warning(f"No numbers for {country.name} ({country.iso_alpha2}), skipped")
                continue
            rows.extend(self._rows(country, numbers))

        return pd.DataFrame(rows, columns=EXPORT_HEADERS)

    def export(self, output_path: Union[str, Path]) -> int:
        """
        Write the CSV file

        Args:
            output_path: new file, an existing file is never overwritten

        Returns:
            int: number of written data rows
        """
        output_path = Path(output_path)
        if output_path.exists():
            raise StorageError(f"A file or directory named {output_path} already exists")

        df = self.to_dataframe()
        try:
            df.to_csv(output_path, index=False, encoding="utf-8", mode="x")
        except OSError as e:
            raise StorageError(f"Could not write CSV file {output_path}: {e}") from e

        logger.info(f"Exported {len(df)} rows of {df['geoId'].nunique()} countries to {output_path}")
        return len(df)
