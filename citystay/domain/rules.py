"""Booking rule validator.

Rules run in a fixed order and the first failure wins:

1. ``duration``  — the stay must be at least one night.
2. ``minNights`` — stay shorter than the property's minimum.
3. ``maxNights`` — stay longer than the property's maximum.
4. ``capacity``  — more guests than the property allows.
5. ``guestCount`` — fewer than one guest.
"""

from dataclasses import dataclass
from datetime import date, datetime

from citystay.domain.dates import nights_between
from citystay.schemas.property import PropertySnapshot


@dataclass(frozen=True)
class RuleCheck:
    ok: bool
    nights: int | None = None
    reason: str | None = None
    limit: int | None = None


def validate_booking_rules(
    property: PropertySnapshot,
    check_in: date | datetime,
    check_out: date | datetime,
    guest_count: int,
) -> RuleCheck:
    """Check a candidate stay against the property's policy.

    On success ``nights`` is the authoritative night count used for pricing.
    """
    nights = nights_between(check_in, check_out)
    if nights <= 0:
        return RuleCheck(ok=False, reason="duration")
    if property.min_nights and nights < property.min_nights:
        return RuleCheck(ok=False, reason="minNights", limit=property.min_nights)
    if property.max_nights and nights > property.max_nights:
        return RuleCheck(ok=False, reason="maxNights", limit=property.max_nights)
    if property.max_guests and guest_count > property.max_guests:
        return RuleCheck(ok=False, reason="capacity", limit=property.max_guests)
    if guest_count < 1:
        return RuleCheck(ok=False, reason="guestCount", limit=1)
    return RuleCheck(ok=True, nights=nights)
