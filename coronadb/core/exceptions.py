"""
CoronaDB Exceptions

Errors raised while ingesting CSV files and accessing the database
"""
from typing import Optional, Sequence


class CoronaDBError(Exception):
    """Base class of all CoronaDB errors"""


class InputFileError(CoronaDBError):
    """The input file is missing or cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")


class FormatUnrecognizedError(CoronaDBError):
    """The first line of the file matches none of the known CSV schemas."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"File {path} does not seem to contain a known CSV format! Only the CSV "
            "formats of the ECDC, Our World In Data and the WHO can be detected."
        )


class HeaderMismatchError(CoronaDBError):
    """The header row does not have the columns the detected schema requires."""

    def __init__(self, schema: str, found: Sequence[str], detail: Optional[str] = None):
        self.schema = schema
        self.found = list(found)
        message = f"CSV headers do not match the expected {schema} headers"
        if detail:
            message += f" ({detail})"
        super().__init__(f"{message}. Found the following headers: {self.found}")


class RecordParseError(CoronaDBError):
    """A single data line could not be parsed."""

    def __init__(self, line: int, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Line {line}: {reason}")


class UnknownCountryError(CoronaDBError):
    """The gazetteer has no entry for the given key."""

    def __init__(self, key: str, by: str):
        self.key = key
        self.by = by
        super().__init__(f"No country with {by} '{key}' in the gazetteer")


class StorageError(CoronaDBError):
    """Schema creation, insert or query failed."""
