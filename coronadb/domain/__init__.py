"""
CoronaDB Domain Models

Database tables and in-memory record types
"""
from .base import Base
from .country import Country
from .covid_record import CovidRecord
from .records import (
    CountryIdentity,
    DailyRecord,
    EnrichedRecord,
    Incidence,
    NumbersRecord,
    NumbersWithIncidence,
    TotalsRecord,
)

__all__ = [
    # Base classes
    "Base",
    # Models
    "Country",
    "CovidRecord",
    # Records
    "CountryIdentity",
    "DailyRecord",
    "EnrichedRecord",
    "TotalsRecord",
    "NumbersRecord",
    "NumbersWithIncidence",
    "Incidence",
]
