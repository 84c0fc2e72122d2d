"""MeterReading Pydantic schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class MeterReadingBase(BaseModel):
    """Base meter reading schema."""

    reading_date: date
    water_units: Decimal = Field(ge=0)
    electric_units: Decimal = Field(ge=0)
    note: str | None = None


class MeterReadingCreate(MeterReadingBase):
    """Schema for recording a room's meters."""

    room_id: int


class MeterReadingResponse(MeterReadingBase):
    """Schema for meter reading response."""

    id: int
    room_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class MeterReadingHistory(BaseModel):
    """Schema for paginated meter reading history."""

    room_id: int
    readings: list[MeterReadingResponse]
    total: int
    limit: int
    offset: int
