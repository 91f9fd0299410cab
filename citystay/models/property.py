"""Property model — rentable units and their booking policy."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from citystay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable unit in a city, with pricing, capacity, and availability policy."""

    __tablename__ = "properties"

    city_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    host_id: Mapped[uuid.UUID | None] = mapped_column(default=None, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False, default="apartment")  # apartment, house, villa, studio, room
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")  # active, inactive, draft

    # Pricing
    nightly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    cleaning_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    security_deposit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    currency: Mapped[str | None] = mapped_column(String(3), default=None)

    # Capacity
    max_guests: Mapped[int | None] = mapped_column(Integer, default=None)

    # Availability policy
    instant_book: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_nights: Mapped[int | None] = mapped_column(Integer, default=None)
    max_nights: Mapped[int | None] = mapped_column(Integer, default=None)
    blackout_dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # ISO date strings

    __table_args__ = (Index("ix_properties_city_status", "city_id", "status"),)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, city_id={self.city_id}, status={self.status!r})>"
