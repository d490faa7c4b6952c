"""
CoronaDB Data Layer

Gazetteer, format detection, source parsers and processors
"""
from .detector import CsvFormat, detect_format
from .gazetteer import Gazetteer, get_gazetteer

__all__ = [
    "CsvFormat",
    "detect_format",
    "Gazetteer",
    "get_gazetteer",
]
