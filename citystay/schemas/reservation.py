"""Pydantic v2 records and request/response schemas for reservations."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from citystay.domain.lifecycle import PaymentStatus, ReservationStatus

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class CostBreakdown(BaseModel):
    """Pricing snapshot stored on a reservation."""

    nightly_rate: Decimal
    cleaning_fee: Decimal
    security_deposit: Decimal
    taxes: Decimal
    currency: str
    total_amount: Decimal

    model_config = ConfigDict(frozen=True)


class ReservationDraft(BaseModel):
    """Everything needed to persist a new reservation."""

    confirmation_code: str
    property_id: uuid.UUID
    user_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    guest_count: int
    status: ReservationStatus
    payment_status: PaymentStatus = PaymentStatus.PENDING
    pricing: CostBreakdown
    notes: str | None = None

    model_config = ConfigDict(frozen=True)


class ReservationRecord(ReservationDraft):
    """A persisted reservation as returned by the store."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ReservationCreate(BaseModel):
    """Schema for requesting a new reservation.

    Date order and stay length are checked by the booking rules, not here, so
    the caller gets a specific reason code instead of a generic 422.
    """

    property_id: uuid.UUID
    user_id: uuid.UUID
    check_in: date
    check_out: date
    guest_count: int = Field(1, ge=1)
    notes: str | None = Field(None, max_length=2000)


class ReservationUpdate(BaseModel):
    """Schema for partially updating a reservation. All fields optional."""

    check_in: date | None = None
    check_out: date | None = None
    guest_count: int | None = Field(None, ge=1)
    notes: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReservationListResponse(BaseModel):
    """Paginated list of reservations."""

    items: list[ReservationRecord]
    total: int


class ConflictSummary(BaseModel):
    reservation_id: uuid.UUID
    check_in: date
    check_out: date
    status: ReservationStatus


class AvailabilityResponse(BaseModel):
    """Outcome of an availability check for a date range."""

    available: bool
    reason: str | None = None
    conflicts: list[ConflictSummary] = Field(default_factory=list)


class BookedRange(ConflictSummary):
    """An active reservation interval shown on the calendar."""


class CalendarDay(BaseModel):
    day: date = Field(..., serialization_alias="date")
    available: bool
    blackout: bool = False


class CalendarResponse(BaseModel):
    """Per-day availability view for a property over ``[start, end)``."""

    property_id: uuid.UUID
    start: date
    end: date
    booked_ranges: list[BookedRange]
    days: list[CalendarDay]


class DateRange(BaseModel):
    start: date
    end: date


class AvailableRangesResponse(BaseModel):
    property_id: uuid.UUID
    ranges: list[DateRange]
    next_available_date: date | None = None
