"""Seed script to populate the database with sample rooms and meter readings."""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.database import Base, SessionLocal, engine
from app.models.bill import Bill  # noqa: F401
from app.models.enums import RoomStatus
from app.models.meter_reading import MeterReading
from app.models.room import Room

SAMPLE_ROOMS = [
    # number, type, floor, monthly, daily, water, electric, common fee
    ("101", "standard", 1, "3000", "150", "20", "8", "100"),
    ("102", "standard", 1, "3000", "150", "20", "8", "100"),
    ("201", "deluxe", 2, "4500", "250", "20", "8", "150"),
]


def seed_database(db: Session) -> list[Room]:
    """Seed the database with sample data. Returns the created rooms."""
    if db.query(Room).first():
        print("Database already has data. Skipping seed.")
        return []

    print("Seeding database...")

    rooms: list[Room] = []
    for number, room_type, floor, monthly, daily, water, electric, common in SAMPLE_ROOMS:
        room = Room(
            number=number,
            room_type=room_type,
            floor=floor,
            status=RoomStatus.OCCUPIED,
            rate_monthly=Decimal(monthly),
            rate_daily=Decimal(daily),
            water_rate=Decimal(water),
            electric_rate=Decimal(electric),
            common_fee=Decimal(common),
            rent_due_day=5,
        )
        rooms.append(room)
    db.add_all(rooms)
    db.flush()

    print(f"Created {len(rooms)} rooms: {', '.join(r.number for r in rooms)}")

    # Month-end readings for the first quarter
    base_water = Decimal("100")
    base_electric = Decimal("1500")
    for index, room in enumerate(rooms):
        for month in range(1, 4):
            db.add(
                MeterReading(
                    room_id=room.id,
                    reading_date=date(2024, month, 28),
                    water_units=base_water + Decimal(12 + index) * month,
                    electric_units=base_electric + Decimal(95 + 10 * index) * month,
                    note=f"Month {month} reading",
                )
            )

    db.commit()

    print(f"Created {len(rooms) * 3} readings (3 months x {len(rooms)} rooms)")
    print("\nSeed data created successfully!")
    return rooms


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_database(session)
    finally:
        session.close()
