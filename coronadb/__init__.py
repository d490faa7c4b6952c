"""
CoronaDB

Normalizes daily COVID-19 case numbers from several CSV sources into one SQLite database.
"""

__version__ = "2.0.0"
