"""
CoronaDB Country Model

One row per country, created on first encounter and never changed afterwards
"""
from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Country(Base):
    """
    Country model

    Column names follow the historic database layout, which is also read by
    the website generator.
    """
    __tablename__ = "country"

    country_id: Mapped[int] = mapped_column("countryId", Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    population: Mapped[int] = mapped_column(Integer, nullable=False, default=-1, comment="-1 if unknown")
    iso_alpha2: Mapped[str] = mapped_column("isoAlpha2", Text, nullable=False, default="", comment="ISO 3166 alpha-2")
    iso_alpha3: Mapped[str] = mapped_column("isoAlpha3", Text, nullable=False, default="", comment="ISO 3166 alpha-3")
    continent: Mapped[str] = mapped_column(Text, nullable=False, default="")

    records: Mapped[list["CovidRecord"]] = relationship(
        "CovidRecord",
        back_populates="country",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_country_alpha2", "isoAlpha2"),
        Index("idx_country_alpha3", "isoAlpha3"),
    )

    def __repr__(self) -> str:
        return f"<Country(id={self.country_id}, iso_alpha2='{self.iso_alpha2}', name='{self.name}')>"
