"""Application configuration settings."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.enums import LateFeeMode
from app.schemas.billing import BillingPolicy


def _get_default_database_url() -> str:
    """Get the default database URL, using the mounted volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/dorm.db"
    return "sqlite:///./dorm.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Dorm Billing"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database - defaults to volume path if /data exists
    DATABASE_URL: str = _get_default_database_url()

    # Billing policy
    DEFAULT_RENT_DUE_DAY: int | None = None
    LATE_FEE_MODE: LateFeeMode = LateFeeMode.PER_DAY
    LATE_FEE_AMOUNT: Decimal = Decimal("100")
    LATE_FEE_PERCENT: Decimal = Decimal("0")
    LATE_FEE_GRACE_DAYS: int = 0
    WATER_METER_MAX: Decimal | None = None
    ELECTRIC_METER_MAX: Decimal | None = None

    def billing_policy(self) -> BillingPolicy:
        """Build the billing engine policy from the configured values."""
        return BillingPolicy(
            late_fee_mode=self.LATE_FEE_MODE,
            late_fee_amount=self.LATE_FEE_AMOUNT,
            late_fee_percent=self.LATE_FEE_PERCENT,
            grace_days=self.LATE_FEE_GRACE_DAYS,
            water_meter_max=self.WATER_METER_MAX,
            electric_meter_max=self.ELECTRIC_METER_MAX,
        )


settings = Settings()
