"""Reservation state machine.

    pending ──(external)──> confirmed ──(external)──> completed
       │                       │
       └──────── cancel ───────┴──> cancelled

A new reservation starts ``confirmed`` when the property allows instant
booking, ``pending`` otherwise. ``cancelled`` and ``completed`` are terminal;
there is no un-cancel.
"""

from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


# Statuses that hold the property's dates.
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.COMPLETED})


def initial_status(instant_book: bool) -> ReservationStatus:
    return ReservationStatus.CONFIRMED if instant_book else ReservationStatus.PENDING


def is_terminal(status: ReservationStatus | str) -> bool:
    return ReservationStatus(status) in TERMINAL_STATUSES


def holds_dates(status: ReservationStatus | str) -> bool:
    return ReservationStatus(status) in ACTIVE_STATUSES


def cancellation_patch() -> dict[str, str]:
    """Fields written by a cancel; applying it twice yields the same state."""
    return {
        "status": ReservationStatus.CANCELLED.value,
        "payment_status": PaymentStatus.REFUNDED.value,
    }
