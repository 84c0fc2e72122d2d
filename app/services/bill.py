"""Bill service: billing stored rooms and keeping the results."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.bill import Bill
from app.models.enums import BillStatus
from app.models.meter_reading import MeterReading
from app.schemas.bill import BillResponse, RoomBillCreate
from app.schemas.billing import AdditionalCharge, BillingInput, BillSummary
from app.services.billing import calculate_bill
from app.services.meter_reading import get_latest_pair, get_reading, reading_to_snapshot
from app.services.room import get_room, room_to_rates

logger = logging.getLogger(__name__)

COMMON_FEE_LABEL = "Common fee"


def _resolve_readings(
    db: Session,
    room_id: int,
    data: RoomBillCreate,
) -> tuple[MeterReading, MeterReading]:
    """Pick the previous and current readings for a room bill."""
    if data.previous_reading_id is None and data.current_reading_id is None:
        return get_latest_pair(db, room_id)
    if data.previous_reading_id is None or data.current_reading_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Give both previous_reading_id and current_reading_id, or neither",
        )

    previous = get_reading(db, data.previous_reading_id)
    current = get_reading(db, data.current_reading_id)
    for reading in (previous, current):
        if reading.room_id != room_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Meter reading {reading.id} does not belong to room {room_id}",
            )
    return previous, current


def create_room_bill(db: Session, room_id: int, data: RoomBillCreate) -> Bill:
    """Bill a stored room from its recorded readings and store the result.

    The room's common fee, when set, is billed as the first additional charge.
    Raises InvalidBillingInput when the engine rejects the request.
    """
    db_room = get_room(db, room_id)
    previous, current = _resolve_readings(db, room_id, data)

    rent_due_day = data.rent_due_day
    if rent_due_day is None:
        rent_due_day = db_room.rent_due_day or settings.DEFAULT_RENT_DUE_DAY

    charges = list(data.additional_charges)
    if db_room.common_fee:
        charges.insert(0, AdditionalCharge(name=COMMON_FEE_LABEL, amount=db_room.common_fee))

    billing_input = BillingInput(
        room=room_to_rates(db_room),
        previous=reading_to_snapshot(previous),
        current=reading_to_snapshot(current),
        rental_type=data.rental_type,
        pay_date=data.pay_date,
        rent_due_day=rent_due_day,
        additional_charges=charges,
    )
    summary = calculate_bill(billing_input, data.policy or settings.billing_policy())

    bill = Bill(
        room_id=room_id,
        previous_reading_id=previous.id,
        current_reading_id=current.id,
        rental_type=summary.rental_type,
        pay_date=data.pay_date,
        base_rent=summary.base_rent,
        water_charge=summary.water_charge,
        electric_charge=summary.electric_charge,
        late_fee=summary.late_fee,
        additional_total=summary.additional_total,
        total=summary.total,
        summary_json=summary.model_dump_json(),
    )
    db.add(bill)
    db.commit()
    db.refresh(bill)
    logger.info("Stored bill %s for room %s: total %s", bill.id, room_id, bill.total)
    return bill


def get_bill(db: Session, bill_id: int) -> Bill:
    """Get a stored bill by ID."""
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill not found",
        )
    return bill


def get_bills_for_room(
    db: Session,
    room_id: int,
    limit: int = 100,
    offset: int = 0,
) -> list[Bill]:
    """Get stored bills for a room, newest first."""
    get_room(db, room_id)
    return (
        db.query(Bill)
        .filter(Bill.room_id == room_id)
        .order_by(Bill.created_at.desc(), Bill.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def update_bill_status(db: Session, bill_id: int, new_status: BillStatus) -> Bill:
    """Change a stored bill's payment status."""
    bill = get_bill(db, bill_id)
    bill.status = new_status
    db.commit()
    db.refresh(bill)
    return bill


def bill_to_response(bill: Bill) -> BillResponse:
    """Convert a Bill model to a response schema."""
    return BillResponse(
        id=bill.id,
        room_id=bill.room_id,
        previous_reading_id=bill.previous_reading_id,
        current_reading_id=bill.current_reading_id,
        rental_type=bill.rental_type,
        pay_date=bill.pay_date,
        status=bill.status,
        total=bill.total,
        created_at=bill.created_at,
        summary=BillSummary.model_validate_json(bill.summary_json),
    )
