"""Tests for the booking rule validator."""

import uuid
from datetime import date

import pytest

from citystay.domain.rules import validate_booking_rules
from citystay.schemas.property import PropertySnapshot


def _snapshot(**overrides) -> PropertySnapshot:
    values = {
        "id": uuid.uuid4(),
        "city_id": uuid.uuid4(),
        "status": "active",
        "min_nights": 2,
        "max_nights": 14,
        "max_guests": 4,
    }
    values.update(overrides)
    return PropertySnapshot(**values)


class TestValidateBookingRules:
    """Rule order: duration, minNights, maxNights, capacity, guestCount."""

    def test_one_night_below_minimum(self):
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 2), 2)
        assert not result.ok
        assert result.reason == "minNights"
        assert result.limit == 2

    def test_valid_stay_returns_nights(self):
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 4), 2)
        assert result.ok
        assert result.nights == 3
        assert result.reason is None

    @pytest.mark.parametrize(
        "check_in, check_out",
        [
            (date(2024, 6, 1), date(2024, 6, 1)),
            (date(2024, 6, 5), date(2024, 6, 1)),
        ],
    )
    def test_non_positive_duration(self, check_in, check_out):
        result = validate_booking_rules(_snapshot(), check_in, check_out, 2)
        assert result.reason == "duration"

    def test_above_maximum(self):
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 16), 2)
        assert result.reason == "maxNights"
        assert result.limit == 14

    def test_too_many_guests(self):
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 4), 5)
        assert result.reason == "capacity"
        assert result.limit == 4

    def test_zero_guests(self):
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 4), 0)
        assert result.reason == "guestCount"

    def test_first_failure_wins(self):
        # Too short and too many guests: the night rule is reported.
        result = validate_booking_rules(_snapshot(), date(2024, 6, 1), date(2024, 6, 2), 10)
        assert result.reason == "minNights"

    def test_unset_limits_are_not_enforced(self):
        prop = _snapshot(min_nights=None, max_nights=None, max_guests=None)
        result = validate_booking_rules(prop, date(2024, 6, 1), date(2024, 9, 1), 40)
        assert result.ok
        assert result.nights == 92
