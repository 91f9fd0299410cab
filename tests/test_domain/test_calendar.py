"""Tests for the calendar generator."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from citystay.domain.calendar import booked_day_keys, build_calendar
from citystay.domain.lifecycle import ReservationStatus
from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import CostBreakdown, ReservationRecord


def _reservation(property_id: uuid.UUID, check_in: date, check_out: date) -> ReservationRecord:
    now = datetime(2024, 5, 1, 12, 0)
    return ReservationRecord(
        id=uuid.uuid4(),
        confirmation_code="ABCD1234",
        property_id=property_id,
        user_id=uuid.uuid4(),
        check_in=check_in,
        check_out=check_out,
        nights=(check_out - check_in).days,
        guest_count=2,
        status=ReservationStatus.CONFIRMED,
        pricing=CostBreakdown(
            nightly_rate=Decimal("100"),
            cleaning_fee=Decimal("0"),
            security_deposit=Decimal("0"),
            taxes=Decimal("0"),
            currency="USD",
            total_amount=Decimal("200.00"),
        ),
        created_at=now,
        updated_at=now,
    )


class TestBuildCalendar:
    def test_two_night_booking_in_five_day_window(self):
        property_id = uuid.uuid4()
        booking = _reservation(property_id, date(2024, 6, 2), date(2024, 6, 4))

        calendar = build_calendar(property_id, [booking], date(2024, 6, 1), date(2024, 6, 6))

        assert len(calendar.days) == 5
        assert [d.available for d in calendar.days] == [True, False, False, True, True]
        assert sum(1 for d in calendar.days if not d.available) == 2
        assert calendar.booked_ranges[0].reservation_id == booking.id

    def test_blackout_flagged_without_changing_availability(self):
        property_id = uuid.uuid4()
        snapshot = PropertySnapshot(
            id=property_id,
            city_id=uuid.uuid4(),
            status="active",
            blackout_dates=[date(2024, 6, 3)],
        )

        calendar = build_calendar(property_id, [], date(2024, 6, 1), date(2024, 6, 5), snapshot)

        blackout_day = calendar.days[2]
        assert blackout_day.day == date(2024, 6, 3)
        assert blackout_day.blackout is True
        assert blackout_day.available is True

    def test_days_serialise_with_date_key(self):
        property_id = uuid.uuid4()
        calendar = build_calendar(property_id, [], date(2024, 6, 1), date(2024, 6, 2))
        payload = calendar.model_dump(mode="json", by_alias=True)
        assert payload["days"] == [{"date": "2024-06-01", "available": True, "blackout": False}]

    def test_booked_day_keys_excludes_checkout(self):
        booking = _reservation(uuid.uuid4(), date(2024, 6, 2), date(2024, 6, 4))
        assert booked_day_keys([booking]) == {"2024-06-02", "2024-06-03"}
