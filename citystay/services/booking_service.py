"""Booking service — reservation lifecycle over the store and cache coordinator.

A booking request flows: rules → availability → pricing → persist → cache
invalidation. Business failures come back as ``Result`` errors; store
failures other than constraint conflicts propagate to the caller.
"""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from datetime import date, datetime
from typing import Any

from citystay.cache.invalidation import CacheCoordinator
from citystay.config import settings
from citystay.domain.availability import (
    AvailabilityResult,
    available_ranges,
    check_availability,
    next_available_date,
)
from citystay.domain.calendar import build_calendar
from citystay.domain.dates import add_days, nights_between, to_day, today
from citystay.domain.lifecycle import (
    PaymentStatus,
    ReservationStatus,
    cancellation_patch,
    initial_status,
    is_terminal,
)
from citystay.domain.pricing import calculate_cost
from citystay.domain.results import BookingError, Result
from citystay.domain.rules import RuleCheck, validate_booking_rules
from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import (
    AvailableRangesResponse,
    CalendarResponse,
    DateRange,
    ReservationDraft,
    ReservationRecord,
)
from citystay.stores.base import PropertySnapshots, ReservationStore, StoreConflictError
from citystay.stores.filters import by_id, listing, overlapping

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
STAY_FIELDS = frozenset({"check_in", "check_out", "guest_count"})
UPDATABLE_FIELDS = STAY_FIELDS | {"notes"}

_RULE_MESSAGES = {
    "duration": "check_out must be after check_in",
    "minNights": "Stay is shorter than the property's minimum of {limit} nights",
    "maxNights": "Stay is longer than the property's maximum of {limit} nights",
    "capacity": "Guest count exceeds the property's capacity of {limit}",
    "guestCount": "At least {limit} guest is required",
}


def generate_confirmation_code(length: int | None = None) -> str:
    """Random human-readable code such as ``K7Q2M9XA``."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length or settings.confirmation_code_length))


# ---------------------------------------------------------------------------
# Error builders
# ---------------------------------------------------------------------------


def _rule_error(check: RuleCheck) -> BookingError:
    message = _RULE_MESSAGES[check.reason].format(limit=check.limit)
    if check.limit is None:
        return BookingError.validation(check.reason, message)
    return BookingError.validation(check.reason, message, limit=check.limit)


def _availability_error(availability: AvailabilityResult) -> BookingError:
    if availability.reason == "blackout":
        return BookingError.conflict("blackout", "Dates include days the property is not available")
    return BookingError.conflict(
        "conflict",
        "Dates conflict with an existing reservation",
        conflicts=[str(r.id) for r in availability.conflicts],
    )


def _property_not_found(property_id: uuid.UUID) -> BookingError:
    return BookingError.not_found("property", "Property not found", property_id=str(property_id))


def _reservation_not_found(reservation_id: uuid.UUID) -> BookingError:
    return BookingError.not_found("reservation", "Reservation not found", reservation_id=str(reservation_id))


_STORAGE_CONFLICT = BookingError.conflict("conflict", "Dates conflict with an existing reservation")


class BookingService:
    """Availability, booking rules, pricing, and the reservation lifecycle."""

    def __init__(
        self,
        reservations: ReservationStore,
        properties: PropertySnapshots,
        coordinator: CacheCoordinator,
        *,
        code_attempts: int | None = None,
    ) -> None:
        self._reservations = reservations
        self._properties = properties
        self._coordinator = coordinator
        self._code_attempts = code_attempts or settings.confirmation_code_attempts

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def check_availability(
        self,
        property_id: uuid.UUID,
        check_in: date | datetime,
        check_out: date | datetime,
        exclude_reservation_id: uuid.UUID | None = None,
    ) -> Result[AvailabilityResult]:
        property = await self._properties.get_snapshot(property_id)
        if property is None:
            return Result.failure(_property_not_found(property_id))
        if nights_between(check_in, check_out) <= 0:
            return Result.failure(BookingError.validation("duration", _RULE_MESSAGES["duration"]))
        availability = await check_availability(
            self._reservations, property, check_in, check_out, exclude_reservation_id
        )
        return Result.success(availability)

    async def get_reservation(self, reservation_id: uuid.UUID) -> Result[ReservationRecord]:
        record = await self._reservations.find_one(by_id(reservation_id))
        if record is None:
            return Result.failure(_reservation_not_found(reservation_id))
        return Result.success(record)

    async def list_reservations(
        self,
        *,
        property_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
        status: ReservationStatus | None = None,
        start: date | None = None,
        end: date | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[ReservationRecord], int]:
        criteria = listing(property_id=property_id, user_id=user_id, status=status, start=start, end=end)
        items = await self._reservations.find(criteria, skip=skip, limit=limit, newest_first=True)
        total = await self._reservations.count(criteria)
        return items, total

    async def get_calendar(
        self,
        property_id: uuid.UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> Result[CalendarResponse]:
        """Per-day availability over ``[start, end)``, defaulting to a year from today."""
        property = await self._properties.get_snapshot(property_id)
        if property is None:
            return Result.failure(_property_not_found(property_id))

        start = to_day(start) if start is not None else today()
        end = to_day(end) if end is not None else add_days(start, settings.calendar_horizon_days)
        if end <= start:
            return Result.failure(BookingError.validation("duration", "Calendar end must be after its start"))

        reservations = await self._reservations.find(overlapping(property_id, start, end))
        return Result.success(build_calendar(property_id, reservations, start, end, property))

    async def get_available_ranges(
        self,
        property_id: uuid.UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> Result[AvailableRangesResponse]:
        property = await self._properties.get_snapshot(property_id)
        if property is None:
            return Result.failure(_property_not_found(property_id))

        start = to_day(start) if start is not None else today()
        end = to_day(end) if end is not None else add_days(start, settings.calendar_horizon_days)
        if end <= start:
            return Result.failure(BookingError.validation("duration", "Range end must be after its start"))

        reservations = await self._reservations.find(overlapping(property_id, start, end))
        ranges = available_ranges(property, reservations, start, end)
        return Result.success(
            AvailableRangesResponse(
                property_id=property_id,
                ranges=[DateRange(start=s, end=e) for s, e in ranges],
                next_available_date=ranges[0][0] if ranges else next_available_date(property, end),
            )
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_reservation(
        self,
        property_id: uuid.UUID,
        user_id: uuid.UUID,
        check_in: date | datetime,
        check_out: date | datetime,
        guest_count: int,
        notes: str | None = None,
    ) -> Result[ReservationRecord]:
        """Validate, check, price, and persist a new reservation."""
        property = await self._properties.get_snapshot(property_id)
        if property is None:
            return Result.failure(_property_not_found(property_id))
        if property.status != "active":
            return Result.failure(
                BookingError.validation("propertyInactive", "Property is not accepting bookings", status=property.status)
            )

        rules = validate_booking_rules(property, check_in, check_out, guest_count)
        if not rules.ok:
            return Result.failure(_rule_error(rules))

        availability = await check_availability(self._reservations, property, check_in, check_out)
        if not availability.available:
            return Result.failure(_availability_error(availability))

        pricing = calculate_cost(property, rules.nights)
        fields: dict[str, Any] = {
            "property_id": property.id,
            "user_id": user_id,
            "check_in": to_day(check_in),
            "check_out": to_day(check_out),
            "nights": rules.nights,
            "guest_count": guest_count,
            "status": initial_status(property.instant_book),
            "payment_status": PaymentStatus.PENDING,
            "pricing": pricing,
            "notes": notes,
        }

        record: ReservationRecord | None = None
        for _ in range(self._code_attempts):
            draft = ReservationDraft(confirmation_code=generate_confirmation_code(), **fields)
            try:
                record = await self._reservations.create(draft)
                break
            except StoreConflictError:
                # Either a concurrent booking took the dates or the code collided;
                # only the former shows up on a fresh availability check.
                recheck = await check_availability(self._reservations, property, check_in, check_out)
                if not recheck.available:
                    return Result.failure(_availability_error(recheck))
        if record is None:
            return Result.failure(_STORAGE_CONFLICT)

        await self._coordinator.invalidate_for(property.id, property.city_id)
        logger.info(
            "Reservation %s (%s) created for property %s: %s..%s, status=%s",
            record.id,
            record.confirmation_code,
            record.property_id,
            record.check_in,
            record.check_out,
            record.status.value,
        )
        return Result.success(record)

    async def update_reservation(self, reservation_id: uuid.UUID, patch: dict[str, Any]) -> Result[ReservationRecord]:
        """Apply ``patch``; stay changes are re-validated and re-priced as a new booking would be."""
        current = await self._reservations.find_one(by_id(reservation_id))
        if current is None:
            return Result.failure(_reservation_not_found(reservation_id))
        if is_terminal(current.status):
            return Result.failure(
                BookingError.conflict("status", f"Reservation is {current.status.value}", status=current.status.value)
            )

        # A null stay field means "keep the current value"; a null note clears it.
        changes = {
            key: value
            for key, value in patch.items()
            if key in UPDATABLE_FIELDS and (value is not None or key == "notes")
        }
        if not changes:
            return Result.success(current)

        property: PropertySnapshot | None = await self._properties.get_snapshot(current.property_id)
        if STAY_FIELDS & changes.keys():
            if property is None:
                return Result.failure(_property_not_found(current.property_id))
            check_in = changes.get("check_in", current.check_in)
            check_out = changes.get("check_out", current.check_out)
            guest_count = changes.get("guest_count", current.guest_count)

            rules = validate_booking_rules(property, check_in, check_out, guest_count)
            if not rules.ok:
                return Result.failure(_rule_error(rules))

            availability = await check_availability(
                self._reservations, property, check_in, check_out, exclude_reservation_id=current.id
            )
            if not availability.available:
                return Result.failure(_availability_error(availability))

            changes.update(
                check_in=to_day(check_in),
                check_out=to_day(check_out),
                guest_count=guest_count,
                nights=rules.nights,
                pricing=calculate_cost(property, rules.nights),
            )

        try:
            record = await self._reservations.update_by_id(current.id, changes)
        except StoreConflictError:
            return Result.failure(_STORAGE_CONFLICT)
        if record is None:
            return Result.failure(_reservation_not_found(reservation_id))

        await self._coordinator.invalidate_for(record.property_id, property.city_id if property else None)
        logger.info("Reservation %s updated: %s", record.id, ", ".join(sorted(changes)))
        return Result.success(record)

    async def cancel_reservation(self, reservation_id: uuid.UUID) -> Result[ReservationRecord]:
        """Mark the reservation cancelled and its payment refunded. Safe to repeat."""
        record = await self._reservations.update_by_id(reservation_id, cancellation_patch())
        if record is None:
            return Result.failure(_reservation_not_found(reservation_id))

        property = await self._properties.get_snapshot(record.property_id)
        await self._coordinator.invalidate_for(record.property_id, property.city_id if property else None)
        logger.info("Reservation %s cancelled", record.id)
        return Result.success(record)
