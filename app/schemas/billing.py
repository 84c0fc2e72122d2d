"""Billing engine schemas: rates, meter snapshots, policy and the itemized summary."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.models.enums import LateFeeMode, LineItemKind, RentalType


def _coerce_to_date(value: Any) -> Any:
    """Accept ISO-8601 date-time values where a calendar date is expected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value).date()
    return value


class RoomRates(BaseModel):
    """Pricing of the room being billed.

    Rates are validated by the engine rather than here so that a negative
    rate is reported as an invalid billing request.
    """

    model_config = {"frozen": True}

    id: int | str
    number: str = ""
    room_type: str = "standard"
    rate_monthly: Decimal
    rate_daily: Decimal
    water_rate: Decimal
    electric_rate: Decimal


class MeterSnapshot(BaseModel):
    """Cumulative water and electric counters read on a given date."""

    model_config = {"frozen": True}

    room_id: int | str
    reading_date: date
    water: Decimal
    electric: Decimal

    @field_validator("reading_date", mode="before")
    @classmethod
    def parse_reading_date(cls, v: Any) -> Any:
        """Allow date-time strings for the reading date."""
        return _coerce_to_date(v)


class AdditionalCharge(BaseModel):
    """Extra line item on a bill. Negative amounts are credits."""

    model_config = {"frozen": True}

    name: str
    amount: Decimal

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the display label is not empty."""
        if not v or not v.strip():
            raise ValueError("Charge name must not be empty")
        return v


class BillingInput(BaseModel):
    """Everything the engine needs to bill one room for one period."""

    model_config = {"frozen": True}

    room: RoomRates
    previous: MeterSnapshot
    current: MeterSnapshot
    rental_type: RentalType
    pay_date: date
    rent_due_day: int | None = None
    additional_charges: list[AdditionalCharge] = []

    @field_validator("pay_date", mode="before")
    @classmethod
    def parse_pay_date(cls, v: Any) -> Any:
        """Allow date-time strings for the payment date."""
        return _coerce_to_date(v)


class BillingPolicy(BaseModel):
    """Late-fee and meter rollover rules applied by the engine.

    Late fees are charged only for monthly rentals with a rent-due day:

        none        no fee
        flat        late_fee_amount once
        per_day     late_fee_amount for every day past due (after grace days)
        percentage  late_fee_percent of the base rent

    When a meter maximum is known, a decreasing counter is treated as a wrap:
    usage = (meter_max - previous) + current. Without one the current reading
    is taken as the usage since the reset.
    """

    model_config = {"frozen": True}

    late_fee_mode: LateFeeMode = LateFeeMode.NONE
    late_fee_amount: Decimal = Field(default=Decimal("0"), ge=0)
    late_fee_percent: Decimal = Field(default=Decimal("0"), ge=0)
    grace_days: int = Field(default=0, ge=0)
    water_meter_max: Decimal | None = Field(default=None, gt=0)
    electric_meter_max: Decimal | None = Field(default=None, gt=0)


class BillLineItem(BaseModel):
    """One line of an itemized bill."""

    model_config = {"frozen": True}

    kind: LineItemKind
    label: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    estimated: bool = False  # Usage estimated after a meter rollover


class BillSummary(BaseModel):
    """Itemized result of a billing calculation."""

    model_config = {"frozen": True}

    rental_type: RentalType
    days_in_period: int
    billed_days: int | None  # Daily rentals only
    water_usage: Decimal
    electric_usage: Decimal
    water_estimated: bool
    electric_estimated: bool
    due_date: date | None
    days_late: int
    base_rent: Decimal
    water_charge: Decimal
    electric_charge: Decimal
    late_fee: Decimal
    additional_total: Decimal
    total: Decimal
    additional_charges: list[AdditionalCharge]
    line_items: list[BillLineItem]


class CalculateBillRequest(BillingInput):
    """Body of the stateless calculate endpoint.

    When ``policy`` is omitted the configured default policy applies.
    """

    model_config = {"frozen": True}

    policy: BillingPolicy | None = None

    def to_billing_input(self) -> BillingInput:
        """Strip the policy to get the engine input."""
        return BillingInput.model_validate(self.model_dump(exclude={"policy"}))
