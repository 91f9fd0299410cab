"""Day-granularity date math shared by the booking core.

All normalisation happens in one reference timezone (``settings.reference_timezone``)
so that two requests never disagree on which calendar day a timestamp belongs to.
Stays are half-open intervals ``[check_in, check_out)``.
"""

from collections.abc import Iterator
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from citystay.config import settings

REFERENCE_TZ = ZoneInfo(settings.reference_timezone)
ONE_DAY = timedelta(days=1)


def start_of_day(value: date | datetime) -> datetime:
    """Return midnight of ``value``'s calendar day in the reference timezone.

    Naive datetimes are taken to already be in the reference timezone; aware
    ones are converted first. Plain dates map to their own midnight.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(REFERENCE_TZ)
        day = value.date()
    else:
        day = value
    return datetime.combine(day, time.min, tzinfo=REFERENCE_TZ)


def to_day(value: date | datetime) -> date:
    """Return the calendar day of ``value`` in the reference timezone."""
    return start_of_day(value).date()


def today() -> date:
    return datetime.now(REFERENCE_TZ).date()


def add_days(value: date, days: int = 1) -> date:
    return value + timedelta(days=days)


def nights_between(a: date | datetime, b: date | datetime) -> int:
    """Number of nights between two days.

    Callers must already have checked ``b > a``; a non-positive result is
    returned as is.
    """
    # Both midnights share the same tzinfo object, so the difference is wall-clock
    # and DST transitions cannot shift it off a whole number of days.
    return round((start_of_day(b) - start_of_day(a)) / ONE_DAY)


def ranges_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Half-open overlap test: touching boundaries (``a_end == b_start``) do not overlap."""
    return a_start < b_end and a_end > b_start


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in ``[start, end)``."""
    day = start
    while day < end:
        yield day
        day += ONE_DAY
