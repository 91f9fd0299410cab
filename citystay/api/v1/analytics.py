"""Analytics API router — occupancy rates across properties."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from citystay.api.deps import get_analytics_service
from citystay.api.errors import unwrap
from citystay.schemas.analytics import OccupancySummaryResponse
from citystay.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/occupancy", response_model=OccupancySummaryResponse)
async def get_occupancy(
    period_start: date = Query(..., description="Start of the analysis period"),
    period_end: date = Query(..., description="End of the analysis period"),
    city_id: uuid.UUID | None = Query(None, alias="cityId", description="Restrict to one city"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> OccupancySummaryResponse:
    """Calculate occupancy rates per property and overall.

    Booked days are counted from pending, confirmed, and completed stays; the
    result is cached until the next booking-relevant write.
    """
    return unwrap(await service.occupancy(period_start, period_end, city_id))
