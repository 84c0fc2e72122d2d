"""MeterReading service for recording and looking up room meter readings."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.models.meter_reading import MeterReading
from app.schemas.billing import MeterSnapshot
from app.schemas.meter_reading import MeterReadingCreate
from app.services.room import get_room

logger = logging.getLogger(__name__)


def create_reading(db: Session, reading_data: MeterReadingCreate) -> MeterReading:
    """Record a room's water and electric meters for a date."""
    # Verify room exists
    get_room(db, reading_data.room_id)

    existing = (
        db.query(MeterReading)
        .filter(
            and_(
                MeterReading.room_id == reading_data.room_id,
                MeterReading.reading_date == reading_data.reading_date,
            )
        )
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Room already has a reading for {reading_data.reading_date.isoformat()}",
        )

    db_reading = MeterReading(
        room_id=reading_data.room_id,
        reading_date=reading_data.reading_date,
        water_units=reading_data.water_units,
        electric_units=reading_data.electric_units,
        note=reading_data.note,
    )
    db.add(db_reading)
    db.commit()
    db.refresh(db_reading)
    logger.info(
        "Recorded reading for room %s on %s", db_reading.room_id, db_reading.reading_date
    )
    return db_reading


def get_reading(db: Session, reading_id: int) -> MeterReading:
    """Get a meter reading by ID."""
    reading = db.query(MeterReading).filter(MeterReading.id == reading_id).first()
    if not reading:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Meter reading not found",
        )
    return reading


def get_readings_history(
    db: Session,
    room_id: int,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[MeterReading], int]:
    """Get reading history for a room with pagination, newest first."""
    query = db.query(MeterReading).filter(MeterReading.room_id == room_id)

    total = query.count()
    readings = query.order_by(MeterReading.reading_date.desc()).offset(offset).limit(limit).all()

    return readings, total


def get_latest_pair(db: Session, room_id: int) -> tuple[MeterReading, MeterReading]:
    """Get the (previous, current) pair of the room's two most recent readings."""
    readings, _ = get_readings_history(db, room_id, limit=2)
    if len(readings) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least two meter readings are needed to bill a room",
        )
    current, previous = readings
    return previous, current


def reading_to_snapshot(reading: MeterReading) -> MeterSnapshot:
    """Convert a MeterReading model to the billing engine's snapshot."""
    return MeterSnapshot(
        room_id=reading.room_id,
        reading_date=reading.reading_date,
        water=reading.water_units,
        electric=reading.electric_units,
    )
