"""Stored bill schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from app.models.enums import BillStatus, RentalType
from app.schemas.billing import AdditionalCharge, BillingPolicy, BillSummary


class RoomBillCreate(BaseModel):
    """Schema for billing a stored room from its recorded readings.

    Without explicit reading ids the room's two most recent readings are used.
    Without ``rent_due_day`` the room's own due day, then the configured
    default, applies.
    """

    rental_type: RentalType
    pay_date: date
    previous_reading_id: int | None = None
    current_reading_id: int | None = None
    rent_due_day: int | None = None
    additional_charges: list[AdditionalCharge] = []
    policy: BillingPolicy | None = None


class BillStatusUpdate(BaseModel):
    """Schema for changing a bill's payment status."""

    status: BillStatus


class BillResponse(BaseModel):
    """Schema for a stored bill."""

    id: int
    room_id: int
    previous_reading_id: int
    current_reading_id: int
    rental_type: RentalType
    pay_date: date
    status: BillStatus
    total: Decimal
    created_at: datetime
    summary: BillSummary
