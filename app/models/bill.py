"""Bill database model - a stored billing engine result."""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import BillStatus, RentalType

if TYPE_CHECKING:
    from app.models.room import Room


class Bill(Base):
    """Persisted bill for one room and billing period.

    The headline amounts are kept in columns for querying; the complete
    itemized summary is stored verbatim as JSON in ``summary_json``.
    """

    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"), index=True)
    previous_reading_id: Mapped[int] = mapped_column(ForeignKey("meter_readings.id"))
    current_reading_id: Mapped[int] = mapped_column(ForeignKey("meter_readings.id"))

    rental_type: Mapped[RentalType] = mapped_column(String(20))
    pay_date: Mapped[date]
    status: Mapped[BillStatus] = mapped_column(String(20), default=BillStatus.PENDING)

    base_rent: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    water_charge: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    electric_charge: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    late_fee: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    additional_total: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    total: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2))
    summary_json: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        index=True,
    )

    # Relationships
    room: Mapped["Room"] = relationship(back_populates="bills")
