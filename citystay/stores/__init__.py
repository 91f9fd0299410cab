"""Persistence adapters for the booking core."""

from citystay.stores.base import PropertySnapshots, ReservationStore, StoreConflictError
from citystay.stores.filters import ReservationFilter
from citystay.stores.properties import PropertySearch, SqlPropertyStore
from citystay.stores.reservations import SqlReservationStore

__all__ = [
    "PropertySearch",
    "PropertySnapshots",
    "ReservationFilter",
    "ReservationStore",
    "SqlPropertyStore",
    "SqlReservationStore",
    "StoreConflictError",
]
