"""SQLAlchemy-backed property access: booking snapshots plus minimal persistence."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from citystay.models.property import Property
from citystay.schemas.property import PropertyResponse, PropertySnapshot


@dataclass(frozen=True)
class PropertySearch:
    """Criteria for listing active properties."""

    city_id: uuid.UUID | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    guests: int | None = None
    instant_book: bool | None = None

    def cache_params(self) -> dict[str, Any]:
        return {
            "cityId": self.city_id,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "guests": self.guests,
            "instantBook": self.instant_book,
        }


def _search_where(criteria: PropertySearch) -> list:
    clauses = [Property.status == "active"]
    if criteria.city_id is not None:
        clauses.append(Property.city_id == criteria.city_id)
    if criteria.min_price is not None:
        clauses.append(Property.nightly_rate >= criteria.min_price)
    if criteria.max_price is not None:
        clauses.append(Property.nightly_rate <= criteria.max_price)
    if criteria.guests is not None:
        clauses.append(Property.max_guests >= criteria.guests)
    if criteria.instant_book is not None:
        clauses.append(Property.instant_book.is_(criteria.instant_book))
    return clauses


def _column_values(values: dict[str, Any]) -> dict[str, Any]:
    if "blackout_dates" in values and values["blackout_dates"] is not None:
        values = {**values, "blackout_dates": sorted({d.isoformat() for d in values["blackout_dates"]})}
    return values


class SqlPropertyStore:
    """Property reads and writes over an ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_snapshot(self, property_id: uuid.UUID) -> PropertySnapshot | None:
        row = await self._session.get(Property, property_id)
        return PropertySnapshot.model_validate(row) if row is not None else None

    async def get(self, property_id: uuid.UUID) -> PropertyResponse | None:
        row = await self._session.get(Property, property_id)
        return PropertyResponse.model_validate(row) if row is not None else None

    async def list_snapshots(self, city_id: uuid.UUID | None = None) -> list[PropertySnapshot]:
        query = select(Property).order_by(Property.created_at, Property.id)
        if city_id is not None:
            query = query.where(Property.city_id == city_id)
        result = await self._session.execute(query)
        return [PropertySnapshot.model_validate(row) for row in result.scalars().all()]

    async def search(self, criteria: PropertySearch, *, skip: int = 0, limit: int = 20) -> tuple[list[PropertyResponse], int]:
        where = _search_where(criteria)
        total = (await self._session.execute(select(func.count()).select_from(Property).where(*where))).scalar_one()
        result = await self._session.execute(
            select(Property).where(*where).order_by(Property.created_at.desc(), Property.id).offset(skip).limit(limit)
        )
        return [PropertyResponse.model_validate(row) for row in result.scalars().all()], total

    async def create(self, values: dict[str, Any]) -> PropertyResponse:
        row = Property(**_column_values(values))
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return PropertyResponse.model_validate(row)

    async def update_by_id(self, property_id: uuid.UUID, patch: dict[str, Any]) -> PropertyResponse | None:
        row = await self._session.get(Property, property_id)
        if row is None:
            return None
        for field, value in _column_values(patch).items():
            setattr(row, field, value)
        await self._session.commit()
        await self._session.refresh(row)
        return PropertyResponse.model_validate(row)

    async def delete_by_id(self, property_id: uuid.UUID) -> bool:
        row = await self._session.get(Property, property_id)
        if row is None:
            return False
        await self._session.delete(row)
        await self._session.commit()
        return True
