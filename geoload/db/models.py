# ========================
# geoload/db/models.py
# ========================

"""
SQLAlchemy models for ingestion targets.

Each model's table name matches the name of the schema that feeds it.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ingestion target tables."""


class Geolocation(Base):
    __tablename__ = "geolocations"
    __table_args__ = (
        UniqueConstraint("ip_address", name="uq_geolocations_ip_address"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip_address: Mapped[str] = mapped_column(String(15), nullable=False)
    country_code: Mapped[str] = mapped_column(String(3), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    latitude: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)
    longitude: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)
    mystery_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    inserted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Geolocation ip_address={self.ip_address!r} city={self.city!r}>"
