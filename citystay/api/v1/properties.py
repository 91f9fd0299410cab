"""Properties API routes — CRUD, cached search, and per-property booking views."""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status

from citystay.api.deps import get_booking_service, get_property_service
from citystay.api.errors import unwrap
from citystay.schemas.property import (
    MessageResponse,
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from citystay.schemas.reservation import (
    AvailabilityResponse,
    AvailableRangesResponse,
    CalendarResponse,
    ConflictSummary,
)
from citystay.services.booking_service import BookingService
from citystay.services.property_service import PropertyService
from citystay.stores.properties import PropertySearch

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    """Create a property and drop the search caches of its city."""
    return await service.create_property(body)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Search active properties",
)
async def search_properties(
    city_id: uuid.UUID | None = Query(None, alias="cityId"),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    guests: int | None = Query(None, ge=1),
    instant_book: bool | None = Query(None, alias="instantBook"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    service: PropertyService = Depends(get_property_service),
) -> PropertyListResponse:
    """Return a page of active properties, served from the search cache when warm."""
    criteria = PropertySearch(
        city_id=city_id,
        min_price=min_price,
        max_price=max_price,
        guests=guests,
        instant_book=instant_book,
    )
    return await service.search_properties(criteria, skip=skip, limit=limit)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a single property",
)
async def get_property(
    property_id: uuid.UUID,
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    return unwrap(await service.get_property(property_id))


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    service: PropertyService = Depends(get_property_service),
) -> PropertyResponse:
    """Partially update a property. Only provided fields are changed."""
    return unwrap(await service.update_property(property_id, body))


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    service: PropertyService = Depends(get_property_service),
) -> MessageResponse:
    unwrap(await service.delete_property(property_id))
    return MessageResponse(message="Property deleted successfully")


# ---------------------------------------------------------------------------
# Booking views
# ---------------------------------------------------------------------------


@router.get(
    "/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check availability for a date range",
)
async def check_availability(
    property_id: uuid.UUID,
    check_in: date = Query(..., description="First night of the stay"),
    check_out: date = Query(..., description="Departure day (exclusive)"),
    exclude_reservation_id: uuid.UUID | None = Query(None, description="Ignore this reservation"),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityResponse:
    """Report whether ``[check_in, check_out)`` is free, listing any conflicting stays."""
    availability = unwrap(
        await service.check_availability(property_id, check_in, check_out, exclude_reservation_id)
    )
    return AvailabilityResponse(
        available=availability.available,
        reason=availability.reason,
        conflicts=[
            ConflictSummary(
                reservation_id=r.id,
                check_in=r.check_in,
                check_out=r.check_out,
                status=r.status,
            )
            for r in availability.conflicts
        ],
    )


@router.get(
    "/{property_id}/calendar",
    response_model=CalendarResponse,
    summary="Per-day availability calendar",
)
async def get_calendar(
    property_id: uuid.UUID,
    start: date | None = Query(None, alias="from", description="First day (defaults to today)"),
    end: date | None = Query(None, alias="to", description="Day after the last one shown"),
    service: BookingService = Depends(get_booking_service),
) -> CalendarResponse:
    return unwrap(await service.get_calendar(property_id, start, end))


@router.get(
    "/{property_id}/available-ranges",
    response_model=AvailableRangesResponse,
    summary="Free date ranges within a window",
)
async def get_available_ranges(
    property_id: uuid.UUID,
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    service: BookingService = Depends(get_booking_service),
) -> AvailableRangesResponse:
    return unwrap(await service.get_available_ranges(property_id, start, end))
