"""
CoronaDB Gazetteer

Static reference table of countries (ISO codes, name, population, continent)
- Shipped as resources/countries.csv and loaded once per process
- Read-only: lookups return immutable CountryIdentity values
"""
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Optional, Tuple, Union

import pandas as pd

from coronadb.core import UnknownCountryError, get_logger
from coronadb.domain import CountryIdentity

logger = get_logger(__name__)

DEFAULT_GAZETTEER_PATH = Path(__file__).parent / "resources" / "countries.csv"

_COLUMNS = ("iso_alpha2", "iso_alpha3", "name", "population", "continent")


class Gazetteer:
    """
    Country lookup by ISO alpha-2 code, ISO alpha-3 code or English name

    Some countries appear more than once under alternative names. They share
    their codes, a lookup by code returns the first entry.

    Example:
        gazetteer = get_gazetteer()
        germany = gazetteer.lookup_by_alpha3("DEU")
        germany.population  # 83019213
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_GAZETTEER_PATH):
        self.path = Path(path)
        self._entries: Tuple[CountryIdentity, ...] = tuple(self._load())

        by_alpha2: Dict[str, CountryIdentity] = {}
        by_alpha3: Dict[str, CountryIdentity] = {}
        by_name: Dict[str, CountryIdentity] = {}
        for entry in self._entries:
            if entry.iso_alpha2:
                by_alpha2.setdefault(entry.iso_alpha2, entry)
            if entry.iso_alpha3:
                by_alpha3.setdefault(entry.iso_alpha3, entry)
            by_name.setdefault(entry.name, entry)

        self._by_alpha2 = MappingProxyType(by_alpha2)
        self._by_alpha3 = MappingProxyType(by_alpha3)
        self._by_name = MappingProxyType(by_name)

        logger.debug(f"Gazetteer loaded: {len(self._entries)} entries from {self.path}")

    def _load(self) -> Iterator[CountryIdentity]:
        # "NA" is Namibia, not a missing value
        df = pd.read_csv(self.path, dtype=str, keep_default_na=False)

        missing = [column for column in _COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"Gazetteer {self.path} lacks columns: {missing}")

        for row in df.itertuples(index=False):
            yield CountryIdentity(
                name=row.name.strip(),
                population=int(row.population) if row.population.strip() else -1,
                iso_alpha2=row.iso_alpha2.strip(),
                iso_alpha3=row.iso_alpha3.strip(),
                continent=row.continent.strip(),
            )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CountryIdentity]:
        return iter(self._entries)

    def lookup_by_alpha2(self, code: str) -> Optional[CountryIdentity]:
        return self._by_alpha2.get(code)

    def lookup_by_alpha3(self, code: str) -> Optional[CountryIdentity]:
        return self._by_alpha3.get(code)

    def lookup_by_name(self, name: str) -> Optional[CountryIdentity]:
        return self._by_name.get(name)

    def require(self, key: str, by: str = "alpha2") -> CountryIdentity:
        """
        Strict lookup

        Args:
            key: code or name to look up
            by: "alpha2", "alpha3" or "name"

        Returns:
            CountryIdentity: gazetteer entry

        Raises:
            UnknownCountryError: no entry matches
        """
        lookups = {
            "alpha2": self.lookup_by_alpha2,
            "alpha3": self.lookup_by_alpha3,
            "name": self.lookup_by_name,
        }
        if by not in lookups:
            raise ValueError(f"Unknown lookup key type: {by}")

        entry = lookups[by](key)
        if entry is None:
            raise UnknownCountryError(key, by)
        return entry


@lru_cache
def get_gazetteer() -> Gazetteer:
    """Process-wide gazetteer loaded from the bundled resource"""
    return Gazetteer()
