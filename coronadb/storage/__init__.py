"""Storage layer"""

from .database import CovidDatabase, drop_regressing_tail

__all__ = ["CovidDatabase", "drop_regressing_tail"]
