"""Enum definitions for rooms, rentals and bills."""

from enum import Enum


class RentalType(str, Enum):
    """Pricing mode of a rental."""

    MONTHLY = "monthly"
    DAILY = "daily"


class RoomStatus(str, Enum):
    """Occupancy state of a room."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class LateFeeMode(str, Enum):
    """How a late rent payment is charged."""

    NONE = "none"
    FLAT = "flat"  # One fixed amount once the grace period is over
    PER_DAY = "per_day"  # Fixed amount for every day late
    PERCENTAGE = "percentage"  # Percent of the base rent


class LineItemKind(str, Enum):
    """Kind of a line on an itemized bill."""

    RENT = "rent"
    WATER = "water"
    ELECTRIC = "electric"
    LATE_FEE = "late_fee"
    ADDITIONAL = "additional"


class BillStatus(str, Enum):
    """Payment state of a stored bill."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
