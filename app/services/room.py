"""Room service for business logic."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.room import Room
from app.schemas.billing import RoomRates
from app.schemas.room import RoomCreate, RoomUpdate

logger = logging.getLogger(__name__)


def create_room(db: Session, room_data: RoomCreate) -> Room:
    """Create a new room."""
    existing = db.query(Room).filter(Room.number == room_data.number).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Room '{room_data.number}' already exists",
        )

    db_room = Room(**room_data.model_dump())
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    logger.info("Created room %s (id=%s)", db_room.number, db_room.id)
    return db_room


def get_room(db: Session, room_id: int) -> Room:
    """Get a room by ID."""
    db_room = db.query(Room).filter(Room.id == room_id).first()
    if not db_room:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    return db_room


def get_rooms(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    include_inactive: bool = False,
) -> list[Room]:
    """Get rooms ordered by number, with pagination."""
    query = db.query(Room)
    if not include_inactive:
        query = query.filter(Room.is_active.is_(True))
    return query.order_by(Room.number).offset(skip).limit(limit).all()


def update_room(db: Session, room_id: int, room_data: RoomUpdate) -> Room:
    """Update a room."""
    db_room = get_room(db, room_id)

    update_data = room_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_room, field, value)

    db.commit()
    db.refresh(db_room)
    return db_room


def deactivate_room(db: Session, room_id: int) -> None:
    """Soft-delete a room by deactivating it."""
    db_room = get_room(db, room_id)
    db_room.is_active = False
    db.commit()
    logger.info("Deactivated room %s (id=%s)", db_room.number, db_room.id)


def room_to_rates(db_room: Room) -> RoomRates:
    """Convert a Room model to the billing engine's rate record."""
    return RoomRates(
        id=db_room.id,
        number=db_room.number,
        room_type=db_room.room_type,
        rate_monthly=db_room.rate_monthly,
        rate_daily=db_room.rate_daily,
        water_rate=db_room.water_rate,
        electric_rate=db_room.electric_rate,
    )
