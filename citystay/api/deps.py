"""Shared API dependencies — single import point for all routers.

The database and cache clients are created and connected by the application
lifespan and live on ``app.state``; these dependencies only hand them out and
assemble per-request services::

    from citystay.api.deps import get_booking_service
"""

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from citystay.cache.client import CacheClient
from citystay.cache.invalidation import CacheCoordinator
from citystay.services.analytics_service import AnalyticsService
from citystay.services.booking_service import BookingService
from citystay.services.property_service import PropertyService
from citystay.stores.properties import SqlPropertyStore
from citystay.stores.reservations import SqlReservationStore


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async database session for FastAPI dependency injection."""
    async with request.app.state.database.session() as session:
        yield session


def get_cache(request: Request) -> CacheClient:
    return request.app.state.cache


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache),
) -> BookingService:
    return BookingService(SqlReservationStore(db), SqlPropertyStore(db), CacheCoordinator(cache))


def get_property_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache),
) -> PropertyService:
    return PropertyService(SqlPropertyStore(db), cache, CacheCoordinator(cache))


def get_analytics_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache),
) -> AnalyticsService:
    return AnalyticsService(SqlReservationStore(db), SqlPropertyStore(db), cache)


__all__ = [
    "get_db",
    "get_cache",
    "get_booking_service",
    "get_property_service",
    "get_analytics_service",
]
