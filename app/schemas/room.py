"""Room Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.models.enums import RoomStatus


class RoomBase(BaseModel):
    """Base room schema."""

    number: str
    room_type: str = "standard"
    floor: int = 1

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        """Validate room number is not empty."""
        if not v or not v.strip():
            raise ValueError("Room number cannot be empty")
        return v.strip()


class RoomCreate(RoomBase):
    """Schema for creating a new room."""

    rate_monthly: Decimal = Field(ge=0)
    rate_daily: Decimal = Field(ge=0)
    water_rate: Decimal = Field(ge=0)
    electric_rate: Decimal = Field(ge=0)
    common_fee: Decimal = Decimal("0")
    rent_due_day: int | None = Field(default=None, ge=1, le=31)


class RoomUpdate(BaseModel):
    """Schema for updating a room."""

    room_type: str | None = None
    floor: int | None = None
    status: RoomStatus | None = None
    rate_monthly: Decimal | None = Field(default=None, ge=0)
    rate_daily: Decimal | None = Field(default=None, ge=0)
    water_rate: Decimal | None = Field(default=None, ge=0)
    electric_rate: Decimal | None = Field(default=None, ge=0)
    common_fee: Decimal | None = None
    rent_due_day: int | None = Field(default=None, ge=1, le=31)
    is_active: bool | None = None


class RoomResponse(RoomBase):
    """Schema for room response."""

    id: int
    status: RoomStatus
    rate_monthly: Decimal
    rate_daily: Decimal
    water_rate: Decimal
    electric_rate: Decimal
    common_fee: Decimal
    rent_due_day: int | None
    created_at: datetime
    is_active: bool

    model_config = {"from_attributes": True}
