"""Tests for write-driven cache invalidation."""

import uuid

from citystay.cache.client import CacheClient
from citystay.cache.invalidation import CacheCoordinator


class TestPatterns:
    def test_city_scoped_patterns(self, recording_cache):
        city_id = uuid.uuid4()
        patterns = CacheCoordinator(recording_cache).patterns_for(city_id)
        assert patterns == [
            "filters:all",
            f"search:properties:*cityId:{city_id}*",
            "search:properties:*cityId:any*",
            "search:nearby:*",
            "analytics:*",
        ]

    def test_unknown_city_drops_every_search(self, recording_cache):
        patterns = CacheCoordinator(recording_cache).patterns_for(None)
        assert "search:properties:*" in patterns
        assert not any("cityId" in p for p in patterns)


class TestInvalidateFor:
    async def test_deletes_city_and_global_entries(self, cache: CacheClient, fake_redis):
        city, other_city = uuid.uuid4(), uuid.uuid4()
        keys = [
            f"search:properties:cityId:{city};guests:2",
            f"search:properties:cityId:{other_city};guests:2",
            "search:properties:cityId:any;guests:2",
            "search:nearby:lat:1;lng:2",
            "analytics:occupancy:from:2024-06-01",
            "filters:all",
        ]
        for key in keys:
            await cache.set(key, 1)

        deleted = await CacheCoordinator(cache).invalidate_for(uuid.uuid4(), city)

        assert deleted == 5
        assert list(fake_redis.data) == [f"search:properties:cityId:{other_city};guests:2"]

    async def test_cache_outage_is_swallowed(self, cache: CacheClient, fake_redis):
        from redis.exceptions import ConnectionError as RedisConnectionError

        fake_redis.fail_with = RedisConnectionError("gone")

        assert await CacheCoordinator(cache).invalidate_for(uuid.uuid4(), uuid.uuid4()) == 0
