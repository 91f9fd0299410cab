"""Tests for PropertyService — cached search and write-driven invalidation."""

import uuid
from datetime import date
from decimal import Decimal

from citystay.cache.client import CacheClient
from citystay.cache.invalidation import CacheCoordinator
from citystay.domain.results import ErrorKind
from citystay.schemas.property import PropertyCreate, PropertyUpdate
from citystay.services.property_service import PropertyService
from citystay.stores.properties import PropertySearch, SqlPropertyStore


def _service(db_session, cache: CacheClient) -> PropertyService:
    return PropertyService(SqlPropertyStore(db_session), cache, CacheCoordinator(cache))


class TestSearchProperties:
    async def test_only_active_properties_match(self, db_session, cache, make_property):
        city_id = uuid.uuid4()
        active = await make_property(city_id=city_id)
        await make_property(city_id=city_id, status="inactive")

        page = await _service(db_session, cache).search_properties(PropertySearch(city_id=city_id))

        assert page.total == 1
        assert page.items[0].id == active.id

    async def test_filters(self, db_session, cache, make_property):
        city_id = uuid.uuid4()
        await make_property(city_id=city_id, nightly_rate=Decimal("80"), max_guests=2)
        big = await make_property(city_id=city_id, nightly_rate=Decimal("250"), max_guests=8, instant_book=True)

        page = await _service(db_session, cache).search_properties(
            PropertySearch(city_id=city_id, min_price=Decimal("100"), guests=6, instant_book=True)
        )

        assert [p.id for p in page.items] == [big.id]

    async def test_results_are_cached_under_city_key(self, db_session, cache, fake_redis, make_property):
        city_id = uuid.uuid4()
        await make_property(city_id=city_id)
        service = _service(db_session, cache)

        await service.search_properties(PropertySearch(city_id=city_id))
        await service.search_properties(PropertySearch(city_id=city_id))

        assert list(fake_redis.data) == [f"search:properties:cityId:{city_id};limit:20;skip:0"]
        assert cache.stats()["hits"] == 1

    async def test_city_agnostic_search_uses_any(self, db_session, cache, fake_redis):
        await _service(db_session, cache).search_properties(PropertySearch(guests=2))
        assert list(fake_redis.data) == ["search:properties:cityId:any;guests:2;limit:20;skip:0"]


class TestPropertyWrites:
    async def test_create_drops_stale_search(self, db_session, cache, fake_redis):
        city_id = uuid.uuid4()
        service = _service(db_session, cache)
        before = await service.search_properties(PropertySearch(city_id=city_id))
        assert before.total == 0

        await service.create_property(
            PropertyCreate(city_id=city_id, name="Canal House", status="active", nightly_rate=Decimal("90"))
        )
        after = await service.search_properties(PropertySearch(city_id=city_id))

        assert after.total == 1

    async def test_city_change_invalidates_both_cities(self, db_session, recording_cache, make_property):
        old_city, new_city = uuid.uuid4(), uuid.uuid4()
        prop = await make_property(city_id=old_city)
        property_id = prop.id
        service = PropertyService(SqlPropertyStore(db_session), recording_cache, CacheCoordinator(recording_cache))

        result = await service.update_property(property_id, PropertyUpdate(city_id=new_city))

        assert result.value.city_id == new_city
        assert f"search:properties:*cityId:{old_city}*" in recording_cache.deleted_patterns
        assert f"search:properties:*cityId:{new_city}*" in recording_cache.deleted_patterns

    async def test_null_blackout_keeps_property_bookable(self, db_session, cache, booking_service, make_property):
        prop = await make_property(blackout_dates=[date(2024, 12, 25)])
        property_id = prop.id

        result = await _service(db_session, cache).update_property(
            property_id, PropertyUpdate(blackout_dates=None, instant_book=None, max_nights=30)
        )

        assert result.value.blackout_dates == [date(2024, 12, 25)]
        assert result.value.instant_book is False
        assert result.value.max_nights == 30
        booking = await booking_service.create_reservation(
            property_id, uuid.uuid4(), date(2024, 6, 10), date(2024, 6, 14), 2
        )
        assert booking.ok

    async def test_timestamps_set_on_create_and_update(self, db_session, cache):
        service = _service(db_session, cache)
        created = await service.create_property(PropertyCreate(city_id=uuid.uuid4(), name="Attic"))

        updated = await service.update_property(created.id, PropertyUpdate(name="Attic Loft"))

        assert created.created_at is not None
        assert updated.value.created_at == created.created_at
        assert updated.value.updated_at >= created.updated_at

    async def test_update_rejects_inverted_night_limits(self, db_session, cache, make_property):
        prop = await make_property(min_nights=2, max_nights=14)

        result = await _service(db_session, cache).update_property(prop.id, PropertyUpdate(min_nights=20))

        assert result.error.kind == ErrorKind.VALIDATION
        assert result.error.reason == "nightLimits"

    async def test_delete(self, db_session, cache, make_property):
        prop = await make_property()
        property_id = prop.id
        service = _service(db_session, cache)

        assert (await service.delete_property(property_id)).ok
        assert (await service.get_property(property_id)).error.kind == ErrorKind.NOT_FOUND
        assert (await service.delete_property(property_id)).error.reason == "property"
