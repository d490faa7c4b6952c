"""
CoronaDB Domain Models Base

SQLAlchemy declarative base
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class"""
