"""Cache coherence for booking-relevant writes.

Invalidation deletes by key pattern rather than enumerating exact keys: it
may drop entries that were still valid, but it cannot miss a stale one. Cache
TTLs bound staleness for anything a pattern does not reach.

Key families:

- ``search:properties:<params>`` — property searches; ``cityId:<id>`` or ``cityId:any``
- ``search:nearby:<params>``     — radius searches, which can span cities
- ``analytics:<report>:<params>`` — aggregates mixing all properties
- ``filters:all``                — search facet values
"""

import logging
import uuid

from citystay.cache.client import CacheStore

logger = logging.getLogger(__name__)

SEARCH_PREFIX = "search:properties"
NEARBY_PREFIX = "search:nearby"
ANALYTICS_PREFIX = "analytics"
FILTERS_KEY = "filters:all"
ANY_CITY = "any"


def city_search_pattern(city_id: uuid.UUID | str | None) -> str:
    if city_id is None:
        return f"{SEARCH_PREFIX}:*"
    return f"{SEARCH_PREFIX}:*cityId:{city_id}*"


class CacheCoordinator:
    """Invalidates every cached read a booking-relevant write could have changed."""

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache

    def patterns_for(self, city_id: uuid.UUID | str | None) -> list[str]:
        patterns = [
            FILTERS_KEY,
            city_search_pattern(city_id),
            f"{NEARBY_PREFIX}:*",
            f"{ANALYTICS_PREFIX}:*",
        ]
        if city_id is not None:
            patterns.insert(2, city_search_pattern(ANY_CITY))
        return patterns

    async def invalidate_for(self, property_id: uuid.UUID, city_id: uuid.UUID | str | None) -> int:
        """Drop cached entries for ``property_id``'s city plus all global families.

        Never raises for cache trouble; the cache client reports failures as
        zero deletions.
        """
        deleted = 0
        for pattern in self.patterns_for(city_id):
            deleted += await self._cache.delete_by_pattern(pattern)
        logger.info("Invalidated caches for property %s (city %s): %d keys", property_id, city_id, deleted)
        return deleted
