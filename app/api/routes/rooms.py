"""Room API routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from app.services import room as room_service

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    room_data: RoomCreate,
    db: Session = Depends(get_db),
):
    """Create a new room with its rates."""
    return room_service.create_room(db, room_data)


@router.get("/", response_model=list[RoomResponse])
def list_rooms(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    include_inactive: bool = Query(False, description="Include deactivated rooms"),
    db: Session = Depends(get_db),
):
    """List rooms."""
    return room_service.get_rooms(db, skip, limit, include_inactive)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    db: Session = Depends(get_db),
):
    """Get a room by ID."""
    return room_service.get_room(db, room_id)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    room_data: RoomUpdate,
    db: Session = Depends(get_db),
):
    """Update a room's details or rates."""
    return room_service.update_room(db, room_id, room_data)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
) -> None:
    """Soft-delete a room (deactivates it)."""
    room_service.deactivate_room(db, room_id)
