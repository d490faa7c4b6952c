"""
CoronaDB Daily Numbers Model

Daily case numbers of one country, including the derived incidence and totals
"""
from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class CovidRecord(Base):
    """
    Daily numbers (time series)

    Keyed by country and ISO date, so writing the same day twice replaces it.
    """
    __tablename__ = "covid19"

    country_id: Mapped[int] = mapped_column(
        "countryId",
        Integer,
        ForeignKey("country.countryId", ondelete="CASCADE"),
        primary_key=True,
    )
    date: Mapped[str] = mapped_column(Text, primary_key=True, comment="YYYY-MM-DD")

    cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deaths: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # NULL until enough days are known or when the population is unknown
    incidence14: Mapped[Optional[float]] = mapped_column(Float)
    incidence7: Mapped[Optional[float]] = mapped_column(Float)

    total_cases: Mapped[Optional[int]] = mapped_column("totalCases", Integer)
    total_deaths: Mapped[Optional[int]] = mapped_column("totalDeaths", Integer)

    country: Mapped["Country"] = relationship("Country", back_populates="records")

    __table_args__ = (
        Index("idx_covid19_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<CovidRecord(country_id={self.country_id}, date={self.date}, cases={self.cases})>"
