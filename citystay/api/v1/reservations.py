"""Reservations API router — thin adapter over ``BookingService``."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from citystay.api.deps import get_booking_service
from citystay.api.errors import unwrap
from citystay.domain.lifecycle import ReservationStatus
from citystay.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationRecord,
    ReservationUpdate,
)
from citystay.services.booking_service import BookingService

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


@router.post(
    "",
    response_model=ReservationRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new reservation",
)
async def create_reservation(
    body: ReservationCreate,
    service: BookingService = Depends(get_booking_service),
) -> ReservationRecord:
    """Book a property for a date range.

    Returns 400 when a booking rule fails, 404 for an unknown property, and
    409 when the dates are taken or fall on blackout days.
    """
    result = await service.create_reservation(
        body.property_id,
        body.user_id,
        body.check_in,
        body.check_out,
        body.guest_count,
        body.notes,
    )
    return unwrap(result)


@router.get(
    "",
    response_model=ReservationListResponse,
    summary="List reservations",
)
async def list_reservations(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    user_id: uuid.UUID | None = Query(None, description="Filter by guest"),
    status_filter: ReservationStatus | None = Query(None, alias="status", description="Filter by status"),
    start: date | None = Query(None, alias="from", description="Stays ending after this date"),
    end: date | None = Query(None, alias="to", description="Stays starting before this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    service: BookingService = Depends(get_booking_service),
) -> dict:
    items, total = await service.list_reservations(
        property_id=property_id,
        user_id=user_id,
        status=status_filter,
        start=start,
        end=end,
        skip=skip,
        limit=limit,
    )
    return {"items": items, "total": total}


@router.get(
    "/{reservation_id}",
    response_model=ReservationRecord,
    summary="Get a reservation",
)
async def get_reservation(
    reservation_id: uuid.UUID,
    service: BookingService = Depends(get_booking_service),
) -> ReservationRecord:
    return unwrap(await service.get_reservation(reservation_id))


@router.patch(
    "/{reservation_id}",
    response_model=ReservationRecord,
    summary="Update a reservation",
)
async def update_reservation(
    reservation_id: uuid.UUID,
    body: ReservationUpdate,
    service: BookingService = Depends(get_booking_service),
) -> ReservationRecord:
    """Partially update a reservation.

    Date or guest-count changes are re-validated and re-priced; notes pass through.
    """
    result = await service.update_reservation(reservation_id, body.model_dump(exclude_unset=True))
    return unwrap(result)


@router.post(
    "/{reservation_id}/cancel",
    response_model=ReservationRecord,
    summary="Cancel a reservation",
)
async def cancel_reservation(
    reservation_id: uuid.UUID,
    service: BookingService = Depends(get_booking_service),
) -> ReservationRecord:
    """Cancel a reservation and mark its payment refunded. Repeating the call is harmless."""
    return unwrap(await service.cancel_reservation(reservation_id))
