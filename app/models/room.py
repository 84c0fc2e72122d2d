"""Room database model."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import RoomStatus

if TYPE_CHECKING:
    from app.models.bill import Bill
    from app.models.meter_reading import MeterReading


class Room(Base):
    """Rentable unit with its pricing."""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    room_type: Mapped[str] = mapped_column(String(50), default="standard")
    floor: Mapped[int] = mapped_column(default=1)
    status: Mapped[RoomStatus] = mapped_column(String(20), default=RoomStatus.AVAILABLE)

    # Pricing in the local currency
    rate_monthly: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    rate_daily: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    water_rate: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=4))
    electric_rate: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=4))
    common_fee: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        default=Decimal("0"),
    )
    rent_due_day: Mapped[int | None] = mapped_column(nullable=True)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    readings: Mapped[list["MeterReading"]] = relationship(back_populates="room")
    bills: Mapped[list["Bill"]] = relationship(back_populates="room")
