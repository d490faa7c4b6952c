"""
CoronaDB Base Parser

Common scan of a source CSV file: header check, row filtering, and the fold of
consecutive rows of one country into a CountryBatch
"""
import itertools
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from coronadb.core import HeaderMismatchError, IngestSettings, RecordParseError, get_config, get_logger
from coronadb.data.dates import normalize_date
from coronadb.domain import CountryIdentity, DailyRecord, EnrichedRecord

logger = get_logger(__name__)

COUNT_MIN = -(2 ** 63)
COUNT_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class RawRow:
    """One accepted data line, not parsed beyond its country key"""
    line: int
    key: str
    fields: Sequence[str]


@dataclass
class CountryBatch:
    """
    All records of one country read from consecutive lines

    identity is the candidate built from the first row. lookup_by names the
    gazetteer index that key belongs to (None if the rows are trusted as is).
    """
    key: str
    identity: CountryIdentity
    records: List[Union[DailyRecord, EnrichedRecord]] = field(default_factory=list)
    lookup_by: Optional[str] = None
    row_continent_wins: bool = False
    has_incidence: bool = False
    first_line: int = 0
    last_line: int = 0

    @property
    def population(self) -> int:
        return self.identity.population

    def __len__(self) -> int:
        return len(self.records)


def parse_count(value: str) -> int:
    """
    Parse a case or death count

    Empty means zero. Some sources write counts as floats ("12.0"), those are
    truncated. Counts must fit a signed 64-bit SQLite INTEGER.

    Raises:
        ValueError: anything else that is not a number, or a number out of range
    """
    value = value.strip()
    if not value:
        return 0
    try:
        number = int(value)
    except ValueError:
        try:
            number = int(float(value))
        except (ValueError, OverflowError):
            raise ValueError(f"'{value}' is not a valid number") from None
    if not COUNT_MIN <= number <= COUNT_MAX:
        raise ValueError(f"'{value}' is out of range for a count")
    return number


def parse_optional_float(value: str) -> Optional[float]:
    """Parse an optional float; empty or unparsable values become None"""
    value = value.strip()
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return None if number != number else number


class BaseCsvParser(ABC):
    """
    Base class of the source parsers

    Subclasses declare the expected header and implement row filtering
    (row_key) and row parsing (parse_row). The scan itself is shared:

        parser = OwidParser()
        for batch in parser.batches(csv.reader(f)):
            ...

    A problem with the header or with a single line raises immediately. Batches
    yielded before that point are complete and can be stored.
    """

    name: str = "CSV"
    expected_headers: Sequence[str] = ()
    lookup_by: Optional[str] = None
    row_continent_wins: bool = False
    has_incidence: bool = False

    def __init__(self, settings: Optional[IngestSettings] = None):
        self.settings = settings or get_config().ingest
        self.logger = get_logger(self.__class__.__name__)
        self.skipped: Counter = Counter()
        self.headers: List[str] = []

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def read_headers(self, reader: Iterator[List[str]]) -> List[str]:
        headers = next(reader, None)
        if headers is None:
            raise HeaderMismatchError(self.name, [], "the file is empty")
        if headers:
            headers[0] = headers[0].lstrip("\ufeff")
        self.check_headers(headers)
        self.headers = headers
        return headers

    def check_headers(self, headers: Sequence[str]) -> None:
        """Require exactly the expected headers. Override to be more tolerant."""
        if list(headers) != list(self.expected_headers):
            raise HeaderMismatchError(self.name, headers)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    @abstractmethod
    def check_length(self, fields: Sequence[str], line: int) -> None:
        """Raise RecordParseError if the line has the wrong number of fields"""

    @abstractmethod
    def row_key(self, fields: Sequence[str]) -> Optional[str]:
        """Country key of a row, or None to skip the row"""

    @abstractmethod
    def row_identity(self, key: str, fields: Sequence[str]) -> CountryIdentity:
        """Candidate identity built from the first row of a country"""

    @abstractmethod
    def parse_row(self, fields: Sequence[str]) -> Union[DailyRecord, EnrichedRecord]:
        """Record of one row; ValueError on invalid content"""

    def finish_records(
        self, batch: CountryBatch, records: List[Union[DailyRecord, EnrichedRecord]]
    ) -> List[Union[DailyRecord, EnrichedRecord]]:
        """Hook applied to the sorted records of a complete batch"""
        return records

    def skip(self, reason: str) -> None:
        self.skipped[reason] += 1

    def raw_rows(self, reader: Iterable[List[str]]) -> Iterator[RawRow]:
        for fields in reader:
            line = getattr(reader, "line_num", 0)
            if not fields:
                continue
            self.check_length(fields, line)
            key = self.row_key(fields)
            if key is None:
                continue
            yield RawRow(line=line, key=key, fields=fields)

    def parse_date_field(self, value: str) -> str:
        """ISO date of a date column; ValueError if invalid"""
        return normalize_date(value)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def build_batch(self, key: str, rows: Iterable[RawRow]) -> CountryBatch:
        """
        Fold the rows of one country into a batch

        If a date occurs more than once the last row wins. The records of
        the batch are sorted by date.
        """
        batch: Optional[CountryBatch] = None
        by_date = {}
        for row in rows:
            if batch is None:
                batch = CountryBatch(
                    key=key,
                    identity=self.row_identity(key, row.fields),
                    lookup_by=self.lookup_by,
                    row_continent_wins=self.row_continent_wins,
                    has_incidence=self.has_incidence,
                    first_line=row.line,
                )
            try:
                record = self.parse_row(row.fields)
            except ValueError as e:
                raise RecordParseError(row.line, str(e)) from e
            if record.date in by_date:
                self.skip("duplicate date")
            by_date[record.date] = record
            batch.last_line = row.line

        records = [by_date[date] for date in sorted(by_date)]
        batch.records = self.finish_records(batch, records)
        return batch

    def batches(self, reader: Iterator[List[str]]) -> Iterator[CountryBatch]:
        """
        Scan a CSV reader and yield one batch per country

        Args:
            reader: csv.reader positioned before the header row

        Raises:
            HeaderMismatchError: header does not match the schema
            RecordParseError: invalid line
        """
        self.skipped.clear()
        self.read_headers(reader)

        count = 0
        for key, rows in itertools.groupby(self.raw_rows(reader), key=lambda row: row.key):
            batch = self.build_batch(key, rows)
            count += 1
            self.logger.debug(f"{self.name}: {key} with {len(batch)} records (lines {batch.first_line}-{batch.last_line})")
            yield batch

        if self.skipped:
            self.logger.info(f"{self.name}: skipped rows {dict(self.skipped)}")
        self.logger.info(f"{self.name}: {count} country batches read")
