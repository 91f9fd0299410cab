"""SQLAlchemy-backed reservation store.

Each write commits before returning, so a storage-level constraint violation
(unique confirmation code, or the PostgreSQL overlap exclusion constraint)
surfaces from the write call itself as ``StoreConflictError``.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from citystay.models.reservation import Reservation
from citystay.schemas.reservation import CostBreakdown, ReservationDraft, ReservationRecord
from citystay.stores.base import StoreConflictError
from citystay.stores.filters import ReservationFilter

logger = logging.getLogger(__name__)

_PRICING_FIELDS = ("nightly_rate", "cleaning_fee", "security_deposit", "taxes", "currency", "total_amount")


def _where(criteria: ReservationFilter) -> list:
    clauses = []
    if criteria.id is not None:
        clauses.append(Reservation.id == criteria.id)
    if criteria.exclude_id is not None:
        clauses.append(Reservation.id != criteria.exclude_id)
    if criteria.property_id is not None:
        clauses.append(Reservation.property_id == criteria.property_id)
    if criteria.property_ids is not None:
        clauses.append(Reservation.property_id.in_(criteria.property_ids))
    if criteria.user_id is not None:
        clauses.append(Reservation.user_id == criteria.user_id)
    if criteria.confirmation_code is not None:
        clauses.append(Reservation.confirmation_code == criteria.confirmation_code)
    if criteria.statuses is not None:
        clauses.append(Reservation.status.in_([s.value for s in criteria.statuses]))
    if criteria.check_in_before is not None:
        clauses.append(Reservation.check_in < criteria.check_in_before)
    if criteria.check_out_after is not None:
        clauses.append(Reservation.check_out > criteria.check_out_after)
    return clauses


def _flatten(values: dict[str, Any]) -> dict[str, Any]:
    """Turn a record-shaped dict into column values."""
    flat = dict(values)
    pricing = flat.pop("pricing", None)
    if pricing is not None:
        if isinstance(pricing, CostBreakdown):
            pricing = pricing.model_dump()
        flat.update({key: pricing[key] for key in _PRICING_FIELDS})
    return {key: value.value if isinstance(value, Enum) else value for key, value in flat.items()}


def to_record(row: Reservation) -> ReservationRecord:
    return ReservationRecord(
        id=row.id,
        confirmation_code=row.confirmation_code,
        property_id=row.property_id,
        user_id=row.user_id,
        check_in=row.check_in,
        check_out=row.check_out,
        nights=row.nights,
        guest_count=row.guest_count,
        status=row.status,
        payment_status=row.payment_status,
        pricing=CostBreakdown(**{key: getattr(row, key) for key in _PRICING_FIELDS}),
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlReservationStore:
    """Reservation store over an ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(
        self,
        criteria: ReservationFilter,
        *,
        skip: int = 0,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> list[ReservationRecord]:
        query = select(Reservation).where(*_where(criteria))
        if newest_first:
            query = query.order_by(Reservation.created_at.desc(), Reservation.id)
        else:
            query = query.order_by(Reservation.check_in, Reservation.id)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self._session.execute(query)
        return [to_record(row) for row in result.scalars().all()]

    async def count(self, criteria: ReservationFilter) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(Reservation).where(*_where(criteria))
        )
        return result.scalar_one()

    async def find_one(self, criteria: ReservationFilter) -> ReservationRecord | None:
        result = await self._session.execute(select(Reservation).where(*_where(criteria)).limit(1))
        row = result.scalar_one_or_none()
        return to_record(row) if row is not None else None

    async def create(self, draft: ReservationDraft) -> ReservationRecord:
        row = Reservation(**_flatten(draft.model_dump()))
        self._session.add(row)
        await self._commit()
        await self._session.refresh(row)
        return to_record(row)

    async def update_by_id(self, reservation_id: uuid.UUID, patch: dict[str, Any]) -> ReservationRecord | None:
        row = await self._session.get(Reservation, reservation_id)
        if row is None:
            return None
        for field, value in _flatten(patch).items():
            setattr(row, field, value)
        await self._commit()
        await self._session.refresh(row)
        return to_record(row)

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.warning("Reservation write rejected by storage constraint: %s", exc.orig)
            raise StoreConflictError(str(exc.orig)) from exc
