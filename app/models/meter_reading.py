"""MeterReading database model - water and electric counters per room."""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.room import Room


class MeterReading(Base):
    """Snapshot of a room's cumulative water and electric meters."""

    __tablename__ = "meter_readings"
    __table_args__ = (UniqueConstraint("room_id", "reading_date", name="uq_room_reading_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
    )  # When added to database
    reading_date: Mapped[date] = mapped_column(index=True)  # When the meters were read

    # Cumulative counters (using Decimal for precision)
    water_units: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    electric_units: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Foreign keys
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"), index=True)

    # Relationships
    room: Mapped["Room"] = relationship(back_populates="readings")
