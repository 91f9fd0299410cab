"""Pricing calculator — a pure function of the property's pricing and the night count."""

from decimal import ROUND_HALF_UP, Decimal

from citystay.config import settings
from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import CostBreakdown

CENT = Decimal("0.01")


def _money(value: Decimal | int | float | None) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_taxes(property: PropertySnapshot, subtotal: Decimal) -> Decimal:
    """Tax amount for a stay. No tax rules exist yet, so this is always zero."""
    return Decimal("0")


def calculate_cost(property: PropertySnapshot, nights: int) -> CostBreakdown:
    """Return the cost breakdown for ``nights`` nights at ``property``.

    ``total = nightly_rate * nights + cleaning_fee + security_deposit + taxes``,
    rounded half-up to the cent. Currency is copied from the property as is.
    """
    nightly_rate = _money(property.nightly_rate)
    cleaning_fee = _money(property.cleaning_fee)
    security_deposit = _money(property.security_deposit)

    subtotal = nightly_rate * nights + cleaning_fee + security_deposit
    taxes = calculate_taxes(property, subtotal)
    total = (subtotal + taxes).quantize(CENT, rounding=ROUND_HALF_UP)

    return CostBreakdown(
        nightly_rate=nightly_rate,
        cleaning_fee=cleaning_fee,
        security_deposit=security_deposit,
        taxes=taxes,
        currency=property.currency or settings.default_currency,
        total_amount=total,
    )
