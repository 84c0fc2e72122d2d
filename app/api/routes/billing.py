"""Billing routes: stateless calculation and stored room bills."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.schemas.bill import BillResponse, BillStatusUpdate, RoomBillCreate
from app.schemas.billing import BillSummary, CalculateBillRequest
from app.services import bill as bill_service
from app.services.billing import calculate_bill

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/calculate", response_model=BillSummary)
def calculate(data: CalculateBillRequest) -> BillSummary:
    """Calculate an itemized bill without storing anything.

    The body carries the room rates, the previous and current meter readings,
    the rental type, the payment date, an optional rent-due day and any
    additional charges. An optional ``policy`` overrides the configured
    late-fee and meter rollover rules.
    """
    policy = data.policy or settings.billing_policy()
    return calculate_bill(data.to_billing_input(), policy)


@router.post(
    "/rooms/{room_id}/bills",
    response_model=BillResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_room_bill(
    room_id: int,
    data: RoomBillCreate,
    db: Session = Depends(get_db),
) -> BillResponse:
    """Bill a room from its recorded readings and store the bill."""
    bill = bill_service.create_room_bill(db, room_id, data)
    return bill_service.bill_to_response(bill)


@router.get("/rooms/{room_id}/bills", response_model=list[BillResponse])
def list_room_bills(
    room_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[BillResponse]:
    """List a room's stored bills, newest first."""
    bills = bill_service.get_bills_for_room(db, room_id, limit, offset)
    return [bill_service.bill_to_response(b) for b in bills]


@router.get("/bills/{bill_id}", response_model=BillResponse)
def get_bill(
    bill_id: int,
    db: Session = Depends(get_db),
) -> BillResponse:
    """Get a stored bill by ID."""
    return bill_service.bill_to_response(bill_service.get_bill(db, bill_id))


@router.patch("/bills/{bill_id}/status", response_model=BillResponse)
def update_bill_status(
    bill_id: int,
    data: BillStatusUpdate,
    db: Session = Depends(get_db),
) -> BillResponse:
    """Mark a stored bill as paid, overdue or cancelled."""
    bill = bill_service.update_bill_status(db, bill_id, data.status)
    return bill_service.bill_to_response(bill)
