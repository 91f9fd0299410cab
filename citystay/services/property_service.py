"""Property writes and cached search.

Property CRUD is kept minimal; what matters here is that every write which
can change booking or search results drops the affected cache entries.
"""

import logging
import uuid

from citystay.cache.client import CacheStore, build_cache_key
from citystay.cache.invalidation import ANY_CITY, SEARCH_PREFIX, CacheCoordinator
from citystay.config import settings
from citystay.domain.results import BookingError, Result
from citystay.schemas.property import PropertyCreate, PropertyListResponse, PropertyResponse, PropertyUpdate
from citystay.stores.properties import PropertySearch, SqlPropertyStore

logger = logging.getLogger(__name__)


# Columns that always hold a value; an explicit null in a patch means "leave unchanged".
REQUIRED_FIELDS = frozenset(
    {"city_id", "name", "property_type", "status", "instant_book", "blackout_dates"}
)


def _not_found(property_id: uuid.UUID) -> BookingError:
    return BookingError.not_found("property", "Property not found", property_id=str(property_id))


class PropertyService:
    def __init__(self, store: SqlPropertyStore, cache: CacheStore, coordinator: CacheCoordinator) -> None:
        self._store = store
        self._cache = cache
        self._coordinator = coordinator

    async def get_property(self, property_id: uuid.UUID) -> Result[PropertyResponse]:
        prop = await self._store.get(property_id)
        if prop is None:
            return Result.failure(_not_found(property_id))
        return Result.success(prop)

    async def search_properties(self, criteria: PropertySearch, *, skip: int = 0, limit: int = 20) -> PropertyListResponse:
        """Active properties matching ``criteria``, read through the search cache."""
        params = criteria.cache_params()
        params["cityId"] = params["cityId"] or ANY_CITY
        key = build_cache_key(SEARCH_PREFIX, {**params, "skip": skip, "limit": limit})

        async def compute() -> dict:
            items, total = await self._store.search(criteria, skip=skip, limit=limit)
            return PropertyListResponse(items=items, total=total).model_dump(mode="json")

        payload = await self._cache.get_or_compute(key, compute, settings.cache_search_ttl_seconds)
        return PropertyListResponse.model_validate(payload)

    async def create_property(self, body: PropertyCreate) -> PropertyResponse:
        prop = await self._store.create(body.model_dump())
        await self._coordinator.invalidate_for(prop.id, prop.city_id)
        logger.info("Property %s created in city %s", prop.id, prop.city_id)
        return prop

    async def update_property(self, property_id: uuid.UUID, body: PropertyUpdate) -> Result[PropertyResponse]:
        before = await self._store.get(property_id)
        if before is None:
            return Result.failure(_not_found(property_id))

        patch = {
            key: value
            for key, value in body.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_FIELDS
        }
        if not patch:
            return Result.success(before)

        min_nights = patch.get("min_nights", before.min_nights)
        max_nights = patch.get("max_nights", before.max_nights)
        if min_nights is not None and max_nights is not None and min_nights > max_nights:
            return Result.failure(
                BookingError.validation("nightLimits", "min_nights must not exceed max_nights")
            )

        prop = await self._store.update_by_id(property_id, patch)
        if prop is None:
            return Result.failure(_not_found(property_id))

        await self._coordinator.invalidate_for(prop.id, before.city_id)
        if prop.city_id != before.city_id:
            await self._coordinator.invalidate_for(prop.id, prop.city_id)
        logger.info("Property %s updated: %s", prop.id, ", ".join(sorted(patch)))
        return Result.success(prop)

    async def delete_property(self, property_id: uuid.UUID) -> Result[None]:
        before = await self._store.get(property_id)
        if before is None or not await self._store.delete_by_id(property_id):
            return Result.failure(_not_found(property_id))

        await self._coordinator.invalidate_for(property_id, before.city_id)
        logger.info("Property %s deleted", property_id)
        return Result.success(None)
