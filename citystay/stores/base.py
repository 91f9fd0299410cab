"""Store contracts the booking core depends on."""

import uuid
from typing import Any, Protocol

from citystay.schemas.property import PropertySnapshot
from citystay.schemas.reservation import ReservationDraft, ReservationRecord
from citystay.stores.filters import ReservationFilter


class StoreConflictError(Exception):
    """The store rejected a write because it violates a uniqueness or exclusion constraint."""


class ReservationStore(Protocol):
    async def find(
        self,
        criteria: ReservationFilter,
        *,
        skip: int = 0,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> list[ReservationRecord]: ...

    async def count(self, criteria: ReservationFilter) -> int: ...

    async def find_one(self, criteria: ReservationFilter) -> ReservationRecord | None: ...

    async def create(self, draft: ReservationDraft) -> ReservationRecord: ...

    async def update_by_id(self, reservation_id: uuid.UUID, patch: dict[str, Any]) -> ReservationRecord | None: ...


class PropertySnapshots(Protocol):
    async def get_snapshot(self, property_id: uuid.UUID) -> PropertySnapshot | None: ...
