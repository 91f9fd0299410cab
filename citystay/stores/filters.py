"""Immutable reservation query criteria.

Stores translate a ``ReservationFilter`` into their own query language; every
field left as ``None`` is unconstrained.
"""

import uuid
from dataclasses import dataclass
from datetime import date

from citystay.domain.lifecycle import ACTIVE_STATUSES, ReservationStatus


@dataclass(frozen=True)
class ReservationFilter:
    id: uuid.UUID | None = None
    exclude_id: uuid.UUID | None = None
    property_id: uuid.UUID | None = None
    property_ids: tuple[uuid.UUID, ...] | None = None
    user_id: uuid.UUID | None = None
    confirmation_code: str | None = None
    statuses: tuple[ReservationStatus, ...] | None = None
    check_in_before: date | None = None  # check_in < value
    check_out_after: date | None = None  # check_out > value


def by_id(reservation_id: uuid.UUID) -> ReservationFilter:
    return ReservationFilter(id=reservation_id)


def overlapping(
    property_id: uuid.UUID,
    start: date,
    end: date,
    statuses=ACTIVE_STATUSES,
    exclude_id: uuid.UUID | None = None,
) -> ReservationFilter:
    """Reservations of ``property_id`` whose ``[check_in, check_out)`` overlaps ``[start, end)``."""
    return ReservationFilter(
        property_id=property_id,
        statuses=tuple(sorted(statuses, key=lambda s: s.value)),
        check_in_before=end,
        check_out_after=start,
        exclude_id=exclude_id,
    )


def listing(
    property_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    status: ReservationStatus | None = None,
    start: date | None = None,
    end: date | None = None,
) -> ReservationFilter:
    """Criteria for reservation listings; ``start``/``end`` keep stays touching that window."""
    return ReservationFilter(
        property_id=property_id,
        user_id=user_id,
        statuses=(status,) if status is not None else None,
        check_in_before=end,
        check_out_after=start,
    )
