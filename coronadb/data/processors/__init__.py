"""Processors: incidence, country resolution and the ingestion pipeline"""

from .incidence import calculate_incidence, calculate_totals
from .pipeline import IngestionPipeline, IngestSummary, create_database
from .resolver import CountryResolver

__all__ = [
    "calculate_incidence",
    "calculate_totals",
    "CountryResolver",
    "IngestionPipeline",
    "IngestSummary",
    "create_database",
]
