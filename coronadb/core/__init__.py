"""Core services"""

from .config import AppSettings, DatabaseSettings, IngestSettings, get_config
from .database import create_sqlite_engine, get_session_maker, session_scope, sqlite_url
from .exceptions import (
    CoronaDBError,
    FormatUnrecognizedError,
    HeaderMismatchError,
    InputFileError,
    RecordParseError,
    StorageError,
    UnknownCountryError,
)
from .logging import get_logger, setup_logging

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "IngestSettings",
    "get_config",
    "setup_logging",
    "get_logger",
    "create_sqlite_engine",
    "get_session_maker",
    "session_scope",
    "sqlite_url",
    "CoronaDBError",
    "InputFileError",
    "FormatUnrecognizedError",
    "HeaderMismatchError",
    "RecordParseError",
    "UnknownCountryError",
    "StorageError",
]
