"""Occupancy analytics, served read-through from the cache.

Results live under ``analytics:occupancy:<params>`` and are dropped by every
booking-relevant write (see ``citystay.cache.invalidation``).
"""

import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from citystay.cache.client import CacheStore, build_cache_key
from citystay.cache.invalidation import ANALYTICS_PREFIX
from citystay.config import settings
from citystay.domain.dates import iter_days
from citystay.domain.lifecycle import ReservationStatus
from citystay.domain.results import BookingError, Result
from citystay.schemas.analytics import OccupancyResponse, OccupancySummaryResponse
from citystay.schemas.reservation import ReservationRecord
from citystay.stores.filters import ReservationFilter
from citystay.stores.properties import SqlPropertyStore
from citystay.stores.reservations import SqlReservationStore

# Stays that occupied (or will occupy) the property.
OCCUPYING_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED)


def calculate_occupancy(
    reservations: list[ReservationRecord],
    period_start: date,
    period_end: date,
) -> tuple[int, int]:
    """Calculate booked days within a period, avoiding double-counting overlaps.

    Returns:
        A tuple of (total_days, booked_days).
    """
    total_days = (period_end - period_start).days
    if total_days <= 0:
        return 0, 0

    booked_dates: set[date] = set()
    for reservation in reservations:
        overlap_start = max(reservation.check_in, period_start)
        overlap_end = min(reservation.check_out, period_end)
        booked_dates.update(iter_days(overlap_start, overlap_end))

    return total_days, len(booked_dates)


def _rate(booked: int, total: int) -> Decimal:
    if total <= 0:
        return Decimal("0.00")
    return (Decimal(booked) * 100 / Decimal(total)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class AnalyticsService:
    def __init__(self, reservations: SqlReservationStore, properties: SqlPropertyStore, cache: CacheStore) -> None:
        self._reservations = reservations
        self._properties = properties
        self._cache = cache

    async def occupancy(
        self,
        period_start: date,
        period_end: date,
        city_id: uuid.UUID | None = None,
    ) -> Result[OccupancySummaryResponse]:
        if period_end <= period_start:
            return Result.failure(BookingError.validation("period", "period_end must be after period_start"))

        key = build_cache_key(
            f"{ANALYTICS_PREFIX}:occupancy",
            {"cityId": city_id, "from": period_start.isoformat(), "to": period_end.isoformat()},
        )

        async def compute() -> dict:
            summary = await self._compute_occupancy(period_start, period_end, city_id)
            return summary.model_dump(mode="json")

        payload = await self._cache.get_or_compute(key, compute, settings.cache_analytics_ttl_seconds)
        return Result.success(OccupancySummaryResponse.model_validate(payload))

    async def _compute_occupancy(
        self,
        period_start: date,
        period_end: date,
        city_id: uuid.UUID | None,
    ) -> OccupancySummaryResponse:
        properties = await self._properties.list_snapshots(city_id)
        reservations = await self._reservations.find(
            ReservationFilter(
                property_ids=tuple(p.id for p in properties),
                statuses=OCCUPYING_STATUSES,
                check_in_before=period_end,
                check_out_after=period_start,
            )
        )
        by_property: dict[uuid.UUID, list[ReservationRecord]] = {}
        for reservation in reservations:
            by_property.setdefault(reservation.property_id, []).append(reservation)

        rows: list[OccupancyResponse] = []
        grand_total = grand_booked = 0
        for prop in properties:
            total_days, booked_days = calculate_occupancy(by_property.get(prop.id, []), period_start, period_end)
            grand_total += total_days
            grand_booked += booked_days
            rows.append(
                OccupancyResponse(
                    property_id=prop.id,
                    city_id=prop.city_id,
                    period_start=period_start,
                    period_end=period_end,
                    total_days=total_days,
                    booked_days=booked_days,
                    occupancy_rate=_rate(booked_days, total_days),
                )
            )

        return OccupancySummaryResponse(
            period_start=period_start,
            period_end=period_end,
            properties=rows,
            overall_occupancy_rate=_rate(grand_booked, grand_total),
        )
