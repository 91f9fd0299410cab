"""Reservation model — a guest's stay on a property for a date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import DDL, Date, Index, Integer, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from citystay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Reservation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of a property by a user for ``[check_in, check_out)``."""

    __tablename__ = "reservations"

    confirmation_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    property_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        index=True,
    )  # pending, confirmed, cancelled, completed
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, paid, refunded, failed

    # Pricing snapshot
    nightly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    taxes: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_reservations_property_dates", "property_id", "check_in", "check_out"),
        Index("ix_reservations_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, property_id={self.property_id}, "
            f"check_in={self.check_in}, check_out={self.check_out}, status={self.status})>"
        )


# PostgreSQL only: no two active reservations of a property may overlap.
# daterange '[)' gives the same half-open semantics as the application check.
event.listen(
    Reservation.__table__,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        "ALTER TABLE reservations ADD CONSTRAINT no_active_reservation_overlap "
        "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&) "
        "WHERE (status IN ('pending', 'confirmed'))"
    ).execute_if(dialect="postgresql"),
)
