"""Billing engine: rent, utility and late-fee calculation for one billing period.

The engine is a pure function of its input and policy. It never touches the
database or the clock, so it can be called from request handlers, services
and tests alike.
"""

import calendar
import logging
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, Overflow, localcontext

from app.core.exceptions import InvalidBillingInput
from app.models.enums import LateFeeMode, LineItemKind, RentalType
from app.schemas.billing import (
    AdditionalCharge,
    BillingInput,
    BillingPolicy,
    BillLineItem,
    BillSummary,
    MeterSnapshot,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
MAX_RENT_DUE_DAY = 31
# Significant digits kept while billing; amounts that need more are rejected
CALCULATION_PRECISION = 60

RATE_FIELDS = ("rate_monthly", "rate_daily", "water_rate", "electric_rate")

NO_POLICY = BillingPolicy()


def to_minor_units(amount: Decimal) -> Decimal:
    """Round a money amount to cents with banker's rounding."""
    return amount.quantize(CENT, rounding=ROUND_HALF_EVEN)


def _is_valid_amount(value: object) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def _check_snapshot(snapshot: MeterSnapshot, which: str) -> None:
    if not isinstance(snapshot.reading_date, date):
        raise InvalidBillingInput(f"The {which} reading has no valid date")
    for utility in ("water", "electric"):
        value = getattr(snapshot, utility)
        if not _is_valid_amount(value) or value < 0:
            raise InvalidBillingInput(
                f"The {which} {utility} reading must be a non-negative number"
            )


def validate_input(data: BillingInput) -> RentalType:
    """Check a billing request before any arithmetic is done.

    Returns the rental type as an enum member.
    """
    room = data.room
    for field in RATE_FIELDS:
        value = getattr(room, field, None)
        if not _is_valid_amount(value) or value < 0:
            raise InvalidBillingInput(f"Room rate '{field}' must be a non-negative amount")

    try:
        rental_type = RentalType(data.rental_type)
    except ValueError:
        raise InvalidBillingInput(f"Unknown rental type: {data.rental_type!r}") from None

    _check_snapshot(data.previous, "previous")
    _check_snapshot(data.current, "current")

    if str(data.previous.room_id) != str(data.current.room_id):
        raise InvalidBillingInput("Previous and current readings belong to different rooms")
    if str(data.current.room_id) != str(room.id):
        raise InvalidBillingInput("Readings do not belong to the room being billed")
    if data.current.reading_date < data.previous.reading_date:
        raise InvalidBillingInput("Current reading date is before the previous reading date")

    if not isinstance(data.pay_date, date):
        raise InvalidBillingInput("Payment date is missing or malformed")
    if data.rent_due_day is not None and not 1 <= data.rent_due_day <= MAX_RENT_DUE_DAY:
        raise InvalidBillingInput("Rent due day must be between 1 and 31")

    for charge in data.additional_charges:
        if not _is_valid_amount(charge.amount):
            raise InvalidBillingInput(f"Additional charge '{charge.name}' has no valid amount")

    return rental_type


def compute_usage(
    previous: Decimal,
    current: Decimal,
    meter_max: Decimal | None = None,
) -> tuple[Decimal, bool]:
    """
    Compute units consumed between two cumulative counter values.

    A decreasing counter means the meter was reset or wrapped:
    with a known meter maximum the usage is (meter_max - previous) + current,
    otherwise the current value is taken as the usage since the reset.

    Returns (usage, estimated).
    """
    delta = current - previous
    if delta >= 0:
        return delta, False
    if meter_max is not None:
        return max(ZERO, (meter_max - previous) + current), True
    return current, True


def due_date_for(reference: date, rent_due_day: int) -> date:
    """Rent due date in the month of ``reference``, clamped to the month's last day."""
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=min(rent_due_day, last_day))


def compute_late_fee(base_rent: Decimal, days_late: int, policy: BillingPolicy) -> Decimal:
    """Late fee for a payment ``days_late`` days after the grace period ended."""
    if days_late <= 0:
        return ZERO
    if policy.late_fee_mode == LateFeeMode.FLAT:
        return policy.late_fee_amount
    if policy.late_fee_mode == LateFeeMode.PER_DAY:
        return policy.late_fee_amount * days_late
    if policy.late_fee_mode == LateFeeMode.PERCENTAGE:
        return base_rent * policy.late_fee_percent / Decimal("100")
    return ZERO


def allocate_minor_units(amounts: list[Decimal], total: Decimal) -> list[Decimal]:
    """
    Round each amount to cents so that the rounded amounts add up to ``total``.

    Each amount is rounded on its own first; the remaining cents go, one per
    line, to the lines whose rounding moved them furthest from their exact value.
    """
    rounded = [to_minor_units(a) for a in amounts]
    residual = int((total - sum(rounded, ZERO)) / CENT)
    if residual:
        step = CENT if residual > 0 else -CENT
        # Largest shortfall first when cents are missing, largest excess first otherwise
        order = sorted(
            range(len(amounts)),
            key=lambda i: (amounts[i] - rounded[i]) * step,
            reverse=True,
        )
        for i in order[: abs(residual)]:
            rounded[i] += step
    return rounded


def _late_fee_label(days_late: int, policy: BillingPolicy) -> str:
    if policy.late_fee_mode != LateFeeMode.PER_DAY:
        return "Late fee"
    return f"Late fee ({days_late} day{'' if days_late == 1 else 's'})"


def calculate_bill(data: BillingInput, policy: BillingPolicy | None = None) -> BillSummary:
    """Calculate the itemized bill for one room and billing period.

    Amounts are kept exact until the end; each charge is rounded to cents
    once and the total is the sum of the rounded charges, as is the sum of
    the line items.

    Raises InvalidBillingInput when the request cannot be billed, including
    amounts too large to be represented in cents.
    """
    policy = policy or NO_POLICY
    rental_type = validate_input(data)
    try:
        with localcontext() as ctx:
            ctx.prec = CALCULATION_PRECISION
            ctx.traps[InvalidOperation] = True
            ctx.traps[Overflow] = True
            return _build_summary(data, rental_type, policy)
    except (InvalidOperation, Overflow) as exc:
        raise InvalidBillingInput("Amount out of range") from exc


def _build_summary(
    data: BillingInput,
    rental_type: RentalType,
    policy: BillingPolicy,
) -> BillSummary:
    room = data.room
    days_in_period = (data.current.reading_date - data.previous.reading_date).days

    # Base rent
    billed_days: int | None = None
    if rental_type == RentalType.MONTHLY:
        rent_quantity = Decimal("1")
        rent_unit_price = room.rate_monthly
        rent_label = "Monthly rent"
    else:
        billed_days = max(1, days_in_period)
        rent_quantity = Decimal(billed_days)
        rent_unit_price = room.rate_daily
        rent_label = "Daily rent"
    base_rent = rent_unit_price * rent_quantity

    # Utilities
    water_usage, water_estimated = compute_usage(
        data.previous.water, data.current.water, policy.water_meter_max
    )
    electric_usage, electric_estimated = compute_usage(
        data.previous.electric, data.current.electric, policy.electric_meter_max
    )
    if water_estimated:
        logger.warning(
            "Water meter rollover for room %s: %s -> %s, estimated usage %s",
            room.id,
            data.previous.water,
            data.current.water,
            water_usage,
        )
    if electric_estimated:
        logger.warning(
            "Electric meter rollover for room %s: %s -> %s, estimated usage %s",
            room.id,
            data.previous.electric,
            data.current.electric,
            electric_usage,
        )
    water_charge = water_usage * room.water_rate
    electric_charge = electric_usage * room.electric_rate

    # Late fee - monthly rentals with a due day only
    due_date: date | None = None
    days_late = 0
    late_fee = ZERO
    if rental_type == RentalType.MONTHLY and data.rent_due_day is not None:
        due_date = due_date_for(data.current.reading_date, data.rent_due_day)
        days_late = max(0, (data.pay_date - due_date).days - policy.grace_days)
        late_fee = compute_late_fee(base_rent, days_late, policy)

    additional_total = sum((c.amount for c in data.additional_charges), ZERO)

    # Round each charge once, then add up the rounded values
    base_rent = to_minor_units(base_rent)
    water_charge = to_minor_units(water_charge)
    electric_charge = to_minor_units(electric_charge)
    late_fee = to_minor_units(late_fee)
    additional_total = to_minor_units(additional_total)
    total = base_rent + water_charge + electric_charge + late_fee + additional_total

    additional_amounts = allocate_minor_units(
        [c.amount for c in data.additional_charges], additional_total
    )
    additional_charges = [
        AdditionalCharge(name=charge.name, amount=amount)
        for charge, amount in zip(data.additional_charges, additional_amounts)
    ]

    line_items = [
        BillLineItem(
            kind=LineItemKind.RENT,
            label=rent_label,
            quantity=rent_quantity,
            unit_price=rent_unit_price,
            amount=base_rent,
        ),
        BillLineItem(
            kind=LineItemKind.WATER,
            label="Water",
            quantity=water_usage,
            unit_price=room.water_rate,
            amount=water_charge,
            estimated=water_estimated,
        ),
        BillLineItem(
            kind=LineItemKind.ELECTRIC,
            label="Electric",
            quantity=electric_usage,
            unit_price=room.electric_rate,
            amount=electric_charge,
            estimated=electric_estimated,
        ),
    ]
    if late_fee:
        per_day = policy.late_fee_mode == LateFeeMode.PER_DAY
        line_items.append(
            BillLineItem(
                kind=LineItemKind.LATE_FEE,
                label=_late_fee_label(days_late, policy),
                quantity=Decimal(days_late) if per_day else Decimal("1"),
                unit_price=policy.late_fee_amount if per_day else late_fee,
                amount=late_fee,
            )
        )
    # Additional charges in the order supplied
    line_items.extend(
        BillLineItem(
            kind=LineItemKind.ADDITIONAL,
            label=charge.name,
            quantity=Decimal("1"),
            unit_price=charge.amount,
            amount=charge.amount,
        )
        for charge in additional_charges
    )

    logger.debug("Bill for room %s (%s): total %s", room.id, rental_type.value, total)

    return BillSummary(
        rental_type=rental_type,
        days_in_period=days_in_period,
        billed_days=billed_days,
        water_usage=water_usage,
        electric_usage=electric_usage,
        water_estimated=water_estimated,
        electric_estimated=electric_estimated,
        due_date=due_date,
        days_late=days_late,
        base_rent=base_rent,
        water_charge=water_charge,
        electric_charge=electric_charge,
        late_fee=late_fee,
        additional_total=additional_total,
        total=total,
        additional_charges=additional_charges,
        line_items=line_items,
    )
