"""
CoronaDB Country Resolver

Maps the country key of a source to the stored country identity
"""
from typing import Dict, Optional, Tuple

from coronadb.core import UnknownCountryError, get_logger
from coronadb.data.gazetteer import Gazetteer, get_gazetteer
from coronadb.data.parsers import CountryBatch
from coronadb.domain import CountryIdentity
from coronadb.storage import CovidDatabase

logger = get_logger(__name__)


class CountryResolver:
    """
    Country resolver

    Codes, population and continent come from the gazetteer, the name from the
    source row. Keys missing in the gazetteer keep what the row provides and
    an unknown population. Resolved identities are cached per run, so the
    database is asked once per key.
    """

    def __init__(self, db: CovidDatabase, gazetteer: Optional[Gazetteer] = None):
        self.db = db
        self.gazetteer = gazetteer or get_gazetteer()
        self._cache: Dict[Tuple[Optional[str], str], CountryIdentity] = {}
        self.unknown_keys = set()

    def merge(
        self,
        key: str,
        candidate: CountryIdentity,
        lookup_by: Optional[str] = None,
        row_continent_wins: bool = False,
    ) -> CountryIdentity:
        """Combine the row's candidate identity with the gazetteer entry of the key"""
        if lookup_by is None:
            return candidate

        try:
            entry = self.gazetteer.require(key, lookup_by)
        except UnknownCountryError as e:
            self.unknown_keys.add(key)
            logger.warning(f"{e}, population of {candidate.name} is unknown")
            return candidate

        if row_continent_wins and candidate.continent:
            continent = candidate.continent
        else:
            continent = entry.continent or candidate.continent

        return CountryIdentity(
            name=candidate.name or entry.name,
            population=entry.population,
            iso_alpha2=candidate.iso_alpha2 or entry.iso_alpha2,
            iso_alpha3=candidate.iso_alpha3 or entry.iso_alpha3,
            continent=continent,
        )

    def resolve(
        self,
        key: str,
        candidate: CountryIdentity,
        lookup_by: Optional[str] = None,
        row_continent_wins: bool = False,
    ) -> CountryIdentity:
        """
        Stored identity of a country

        Args:
            key: country key of the source (alpha-2, alpha-3 code)
            candidate: identity built from the source row
            lookup_by: gazetteer index of the key, None to trust the row
            row_continent_wins: prefer the row's continent over the gazetteer's

        Returns:
            CountryIdentity: identity with country_id > 0
        """
        cache_key = (lookup_by, key)
        if cache_key in self._cache:
            return self._cache[cache_key]

        identity = self.merge(key, candidate, lookup_by, row_continent_wins)
        country_id = self.db.get_or_insert_country(
            identity.iso_alpha2,
            identity.name,
            identity.population,
            identity.iso_alpha3,
            identity.continent,
        )
        identity = identity.with_id(country_id)
        self._cache[cache_key] = identity
        return identity

    def resolve_batch(self, batch: CountryBatch) -> CountryIdentity:
        return self.resolve(batch.key, batch.identity, batch.lookup_by, batch.row_continent_wins)
