"""
CoronaDB Ingestion Pipeline

detect format -> parse country batches -> resolve country -> incidence & totals -> store
"""
import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from coronadb.core import (
    CoronaDBError,
    FormatUnrecognizedError,
    IngestSettings,
    InputFileError,
    RecordParseError,
    get_config,
    get_logger,
)
from coronadb.data.dates import fill_missing_dates
from coronadb.data.detector import CsvFormat, detect_format
from coronadb.data.gazetteer import Gazetteer
from coronadb.data.parsers import CountryBatch, get_parser
from coronadb.storage import CovidDatabase

from .incidence import calculate_incidence, calculate_totals
from .resolver import CountryResolver

logger = get_logger(__name__)


@dataclass
class IngestSummary:
    """Result of one ingestion run"""

    path: Path
    csv_format: CsvFormat
    countries: int = 0
    records: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)
    unknown_countries: int = 0


class IngestionPipeline:
    """
    Reads one CSV file into an open database

    Every country batch is stored in its own transaction as soon as it is
    complete. If a later line fails, the countries stored before stay in
    the database.
    """

    def __init__(
        self,
        db: CovidDatabase,
        settings: Optional[IngestSettings] = None,
        gazetteer: Optional[Gazetteer] = None,
    ):
        self.db = db
        self.settings = settings or get_config().ingest
        self.resolver = CountryResolver(db, gazetteer)

    def process_batch(self, batch: CountryBatch) -> int:
        """
        Resolve, enrich and store one country batch

        Returns:
            int: number of stored records
        """
        identity = self.resolver.resolve_batch(batch)
        records = batch.records

        if batch.has_incidence:
            enriched = records
        else:
            if self.settings.fill_missing_dates:
                try:
                    records = fill_missing_dates(records, self.settings.max_gap_days)
                except ValueError as e:
                    raise RecordParseError(batch.last_line, f"{identity.name}: {e}") from e
            enriched = calculate_incidence(records, identity.population)

        totals = calculate_totals(enriched)
        return self.db.insert_series(identity.country_id, totals)

    def ingest(self, csv_path: Union[str, Path], csv_format: Optional[CsvFormat] = None) -> IngestSummary:
        """
        Read a CSV file into the database

        Args:
            csv_path: input file
            csv_format: schema of the file, detected if not given

        Returns:
            IngestSummary: counts of the run

        Raises:
            InputFileError, FormatUnrecognizedError, HeaderMismatchError,
            RecordParseError, StorageError
        """
        csv_path = Path(csv_path)
        if csv_format is None:
            csv_format = detect_format(csv_path)
        if csv_format == CsvFormat.UNRECOGNIZED:
            raise FormatUnrecognizedError(str(csv_path))

        logger.info(f"Reading {csv_path} as {csv_format.label} CSV")
        parser = get_parser(csv_format, self.settings)
        summary = IngestSummary(path=csv_path, csv_format=csv_format)

        try:
            with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.reader(f)
                try:
                    for batch in parser.batches(reader):
                        summary.records += self.process_batch(batch)
                        summary.countries += 1
                except csv.Error as e:
                    raise RecordParseError(reader.line_num, str(e)) from e
        except OSError as e:
            raise InputFileError(str(csv_path), str(e)) from e
        except UnicodeDecodeError as e:
            raise InputFileError(str(csv_path), f"not UTF-8 encoded: {e}") from e
        except CoronaDBError as e:
            logger.error(f"Ingestion of {csv_path} aborted after {summary.countries} countries: {e}")
            raise

        summary.skipped = dict(parser.skipped)
        summary.unknown_countries = len(self.resolver.unknown_keys)
        logger.info(
            f"Finished {csv_path}: {summary.countries} countries, {summary.records} records"
        )
        return summary


def create_database(
    csv_path: Union[str, Path],
    db_path: Union[str, Path],
    settings: Optional[IngestSettings] = None,
    gazetteer: Optional[Gazetteer] = None,
) -> IngestSummary:
    """
    Create a new database from a CSV file

    The format is detected before the database file is created, so an
    unreadable or unknown input leaves no empty database behind.
    """
    csv_path = Path(csv_path)
    csv_format = detect_format(csv_path)
    if csv_format == CsvFormat.UNRECOGNIZED:
        raise FormatUnrecognizedError(str(csv_path))

    with CovidDatabase.create(db_path) as db:
        db.backfill_totals()
        pipeline = IngestionPipeline(db, settings=settings, gazetteer=gazetteer)
        return pipeline.ingest(csv_path, csv_format)
