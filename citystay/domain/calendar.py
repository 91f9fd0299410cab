"""Calendar generator — a per-day projection of active reservations.

Nothing here is persisted; the view is rebuilt from reservation state on
every request.
"""

import uuid
from datetime import date

from citystay.domain.dates import iter_days
from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import BookedRange, CalendarDay, CalendarResponse, ReservationRecord


def booked_day_keys(reservations: list[ReservationRecord]) -> set[str]:
    """ISO keys of every night covered by ``reservations``."""
    keys: set[str] = set()
    for reservation in reservations:
        keys.update(day.isoformat() for day in iter_days(reservation.check_in, reservation.check_out))
    return keys


def build_calendar(
    property_id: uuid.UUID,
    reservations: list[ReservationRecord],
    start: date,
    end: date,
    property: PropertySnapshot | None = None,
) -> CalendarResponse:
    """Day-by-day availability over ``[start, end)``.

    A day is available iff no reservation in ``reservations`` covers it.
    Blackout dates are flagged on their own and do not change ``available``.
    """
    booked = booked_day_keys(reservations)
    blackout = {d.isoformat() for d in property.blackout_dates} if property is not None else set()

    days = [
        CalendarDay(day=day, available=day.isoformat() not in booked, blackout=day.isoformat() in blackout)
        for day in iter_days(start, end)
    ]
    booked_ranges = [
        BookedRange(
            reservation_id=r.id,
            check_in=r.check_in,
            check_out=r.check_out,
            status=r.status,
        )
        for r in reservations
    ]
    return CalendarResponse(
        property_id=property_id,
        start=start,
        end=end,
        booked_ranges=booked_ranges,
        days=days,
    )
