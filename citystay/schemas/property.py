"""Pydantic v2 schemas for properties: booking snapshot plus request/response models."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

_STATUS_PATTERN = "^(active|inactive|draft)$"
_TYPE_PATTERN = "^(apartment|house|villa|studio|room)$"


class PropertySnapshot(BaseModel):
    """Immutable view of the property fields the booking core reads.

    Taken once per request; a reservation's pricing snapshot is derived from it
    and never re-read from the live property afterwards.
    """

    id: uuid.UUID
    city_id: uuid.UUID
    status: str
    nightly_rate: Decimal | None = None
    cleaning_fee: Decimal | None = None
    security_deposit: Decimal | None = None
    currency: str | None = None
    max_guests: int | None = None
    instant_book: bool = False
    min_nights: int | None = None
    max_nights: int | None = None
    blackout_dates: list[date] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, frozen=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    city_id: uuid.UUID
    host_id: uuid.UUID | None = None
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    property_type: str = Field("apartment", pattern=_TYPE_PATTERN)
    status: str = Field("draft", pattern=_STATUS_PATTERN)
    nightly_rate: Decimal | None = Field(None, ge=0)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    security_deposit: Decimal | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    max_guests: int | None = Field(None, ge=1, le=50)
    instant_book: bool = False
    min_nights: int | None = Field(None, ge=1)
    max_nights: int | None = Field(None, ge=1)
    blackout_dates: list[date] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_night_limits(self) -> "PropertyCreate":
        """If both limits are provided, validate min_nights <= max_nights."""
        if self.min_nights is not None and self.max_nights is not None and self.min_nights > self.max_nights:
            raise ValueError("min_nights must not exceed max_nights")
        return self


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    city_id: uuid.UUID | None = None
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    property_type: str | None = Field(None, pattern=_TYPE_PATTERN)
    status: str | None = Field(None, pattern=_STATUS_PATTERN)
    nightly_rate: Decimal | None = Field(None, ge=0)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    security_deposit: Decimal | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    max_guests: int | None = Field(None, ge=1, le=50)
    instant_book: bool | None = None
    min_nights: int | None = Field(None, ge=1)
    max_nights: int | None = Field(None, ge=1)
    blackout_dates: list[date] | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(PropertySnapshot):
    """Public property information returned from the API."""

    host_id: uuid.UUID | None = None
    name: str
    description: str | None = None
    property_type: str
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    """Page of properties matching a search."""

    items: list[PropertyResponse]
    total: int


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
