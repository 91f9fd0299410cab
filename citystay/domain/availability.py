"""Availability checker — conflicting reservations and blackout collisions.

Overlap formula:  (existing.check_in < new.check_out) AND (existing.check_out > new.check_in)
Strict inequality allows check-out day == check-in day (back-to-back stays are OK).

Only active statuses (pending, confirmed) hold dates. The check is advisory:
it runs before the write, and the store's own constraint remains the final word.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from citystay.domain.dates import add_days, iter_days, ranges_overlap, to_day
from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import ReservationRecord
from citystay.stores.base import ReservationStore
from citystay.stores.filters import overlapping

logger = logging.getLogger(__name__)

NEXT_AVAILABLE_SCAN_DAYS = 365


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: str | None = None  # conflict, blackout
    conflicts: list[ReservationRecord] = field(default_factory=list)


def blackout_days_within(property: PropertySnapshot, start: date, end: date) -> list[date]:
    """Blackout days of ``property`` that fall inside ``[start, end)``."""
    return sorted({d for d in property.blackout_dates if ranges_overlap(start, end, d, add_days(d))})


async def check_availability(
    store: ReservationStore,
    property: PropertySnapshot,
    check_in: date | datetime,
    check_out: date | datetime,
    exclude_reservation_id: uuid.UUID | None = None,
) -> AvailabilityResult:
    """Return whether ``[check_in, check_out)`` is free on ``property``.

    Store failures propagate; they are never read as "no conflict".
    """
    start, end = to_day(check_in), to_day(check_out)

    conflicts = await store.find(overlapping(property.id, start, end, exclude_id=exclude_reservation_id))
    if conflicts:
        logger.warning(
            "Date conflict on property %s for %s..%s: %s",
            property.id,
            start.isoformat(),
            end.isoformat(),
            ", ".join(str(r.id) for r in conflicts),
        )
        return AvailabilityResult(available=False, reason="conflict", conflicts=conflicts)

    if blackout_days_within(property, start, end):
        return AvailabilityResult(available=False, reason="blackout")

    return AvailabilityResult(available=True)


def next_available_date(property: PropertySnapshot, start: date) -> date | None:
    """First day at or after ``start`` that is not a blackout date, scanning one year ahead."""
    blackout = set(property.blackout_dates)
    for day in iter_days(start, add_days(start, NEXT_AVAILABLE_SCAN_DAYS)):
        if day not in blackout:
            return day
    return None


def available_ranges(
    property: PropertySnapshot,
    reservations: list[ReservationRecord],
    start: date,
    end: date,
) -> list[tuple[date, date]]:
    """Maximal ``[start, end)`` runs inside the window free of blackouts and active stays."""
    blocked = set(property.blackout_dates)
    for reservation in reservations:
        blocked.update(iter_days(reservation.check_in, reservation.check_out))

    ranges: list[tuple[date, date]] = []
    run_start: date | None = None
    for day in iter_days(start, end):
        if day in blocked:
            if run_start is not None:
                ranges.append((run_start, day))
                run_start = None
        elif run_start is None:
            run_start = day
    if run_start is not None:
        ranges.append((run_start, end))
    return ranges
