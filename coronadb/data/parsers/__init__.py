"""
CoronaDB Source Parsers

One parser per known CSV schema, dispatched by the detected format:

    with open(path, encoding="utf-8-sig", newline="") as f:
        for batch in parse(CsvFormat.OWID, csv.reader(f)):
            ...
"""
from typing import Dict, Iterator, List, Optional, Type

from coronadb.core import IngestSettings
from coronadb.data.detector import CsvFormat

from .base import BaseCsvParser, CountryBatch, RawRow, parse_count, parse_optional_float
from .ecdc import EcdcParser
from .owid import OwidParser
from .owid_etl_compact import OwidEtlCompactParser
from .who import WhoParser

PARSERS: Dict[CsvFormat, Type[BaseCsvParser]] = {
    CsvFormat.ECDC: EcdcParser,
    CsvFormat.OWID: OwidParser,
    CsvFormat.OWID_ETL_COMPACT: OwidEtlCompactParser,
    CsvFormat.WHO: WhoParser,
}


def get_parser(schema: CsvFormat, settings: Optional[IngestSettings] = None) -> BaseCsvParser:
    """Parser instance for a detected format"""
    try:
        parser_class = PARSERS[schema]
    except KeyError:
        raise ValueError(f"No parser for format: {schema}") from None
    return parser_class(settings)


def parse(
    schema: CsvFormat,
    reader: Iterator[List[str]],
    settings: Optional[IngestSettings] = None,
) -> Iterator[CountryBatch]:
    """Yield the country batches of a CSV reader in the given schema"""
    return get_parser(schema, settings).batches(reader)


__all__ = [
    "BaseCsvParser",
    "CountryBatch",
    "RawRow",
    "EcdcParser",
    "OwidParser",
    "OwidEtlCompactParser",
    "WhoParser",
    "PARSERS",
    "get_parser",
    "parse",
    "parse_count",
    "parse_optional_float",
]
