"""Tests for the pricing calculator."""

import uuid
from decimal import Decimal

from citystay.config import settings
from citystay.domain.pricing import calculate_cost
from citystay.schemas.property import PropertySnapshot


def _snapshot(**overrides) -> PropertySnapshot:
    values = {
        "id": uuid.uuid4(),
        "city_id": uuid.uuid4(),
        "status": "active",
        "nightly_rate": Decimal("100"),
        "cleaning_fee": Decimal("20"),
        "security_deposit": Decimal("50"),
        "currency": "EUR",
    }
    values.update(overrides)
    return PropertySnapshot(**values)


class TestCalculateCost:
    def test_three_nights_with_fees(self):
        cost = calculate_cost(_snapshot(), 3)
        assert cost.total_amount == Decimal("370.00")
        assert cost.nightly_rate == Decimal("100")
        assert cost.cleaning_fee == Decimal("20")
        assert cost.security_deposit == Decimal("50")
        assert cost.taxes == Decimal("0")
        assert cost.currency == "EUR"

    def test_missing_fees_count_as_zero(self):
        cost = calculate_cost(_snapshot(cleaning_fee=None, security_deposit=None), 2)
        assert cost.total_amount == Decimal("200.00")
        assert cost.cleaning_fee == Decimal("0")

    def test_rounds_half_up_to_the_cent(self):
        cost = calculate_cost(
            _snapshot(nightly_rate=Decimal("33.335"), cleaning_fee=None, security_deposit=None), 1
        )
        assert cost.total_amount == Decimal("33.34")

    def test_fractional_rate_times_nights(self):
        cost = calculate_cost(_snapshot(nightly_rate=Decimal("99.99"), cleaning_fee=Decimal("0.01")), 3)
        assert cost.total_amount == Decimal("350.00")

    def test_currency_falls_back_to_default(self):
        cost = calculate_cost(_snapshot(currency=None), 1)
        assert cost.currency == settings.default_currency
