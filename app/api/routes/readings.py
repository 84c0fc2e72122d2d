"""MeterReading routes for recording room meters."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.meter_reading import (
    MeterReadingCreate,
    MeterReadingHistory,
    MeterReadingResponse,
)
from app.services import meter_reading as reading_service

router = APIRouter(prefix="/readings", tags=["meter-readings"])


@router.post(
    "/",
    response_model=MeterReadingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_reading(
    reading_data: MeterReadingCreate,
    db: Session = Depends(get_db),
):
    """Record a room's water and electric meters."""
    return reading_service.create_reading(db, reading_data)


@router.get("/{reading_id}", response_model=MeterReadingResponse)
def get_reading(
    reading_id: int,
    db: Session = Depends(get_db),
):
    """Get a meter reading by ID."""
    return reading_service.get_reading(db, reading_id)


@router.get("/room/{room_id}/history", response_model=MeterReadingHistory)
def get_room_reading_history(
    room_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Get reading history for a room with pagination."""
    readings, total = reading_service.get_readings_history(db, room_id, limit, offset)
    return MeterReadingHistory(
        room_id=room_id,
        readings=[MeterReadingResponse.model_validate(r) for r in readings],
        total=total,
        limit=limit,
        offset=offset,
    )
